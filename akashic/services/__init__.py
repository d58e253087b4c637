from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from akashic.core.config import Settings
from akashic.repositories import (
    CraftingRepository,
    InventoryRepository,
    LedgerRepository,
    MessageRepository,
    ScrollRepository,
    SessionRepository,
    UserRepository,
)

from .catalog import CatalogService, ManaUnlockResult
from .chat import ChatService
from .contact import ContactService
from .crafting import CraftingService, IngredientCheck
from .inventory import CrystalPurchase, InventoryService
from .ledger import LedgerService, PurchaseResult, ReconciliationReport
from .lore import LoreResponder, Responder
from .user import UserService


@dataclass
class Services:
    """Every service of one unit of work, sharing a single session."""

    ledger: LedgerService
    catalog: CatalogService
    users: UserService
    inventory: InventoryService
    crafting: CraftingService
    chat: ChatService
    contact: ContactService

    @classmethod
    def build(cls, session: AsyncSession, settings: Settings, responder: Responder | None = None) -> "Services":
        user_repo = UserRepository(session)
        inventory_repo = InventoryRepository(session)
        message_repo = MessageRepository(session)

        ledger = LedgerService(session, user_repo, LedgerRepository(session))
        inventory = InventoryService(session, inventory_repo, ledger)
        return cls(
            ledger=ledger,
            catalog=CatalogService(session, ScrollRepository(session), ledger),
            users=UserService(session, user_repo, SessionRepository(session), ledger, inventory, settings),
            inventory=inventory,
            crafting=CraftingService(session, CraftingRepository(session), inventory_repo, inventory),
            chat=ChatService(session, message_repo, ledger, settings, responder),
            contact=ContactService(session, message_repo),
        )


__all__ = [
    "CatalogService",
    "ChatService",
    "ContactService",
    "CraftingService",
    "CrystalPurchase",
    "IngredientCheck",
    "InventoryService",
    "LedgerService",
    "LoreResponder",
    "ManaUnlockResult",
    "PurchaseResult",
    "ReconciliationReport",
    "Responder",
    "Services",
    "UserService",
]
