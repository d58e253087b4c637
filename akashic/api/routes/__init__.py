from fastapi import APIRouter

from . import auth, chat, contact, crafting, inventory, mana, scrolls

api_router = APIRouter()
for module in (auth, scrolls, mana, inventory, crafting, chat, contact):
    api_router.include_router(module.router)

__all__ = ["api_router"]
