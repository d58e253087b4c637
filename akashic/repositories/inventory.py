from collections.abc import Sequence
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from akashic.db.utils import apply_dict_updates
from akashic.models.inventory import InventoryItem


class InventoryRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_user(self, user_id: int) -> Sequence[InventoryItem]:
        stmt = select(InventoryItem).where(InventoryItem.user_id == user_id).order_by(InventoryItem.id)
        return (await self.session.scalars(stmt)).all()

    async def list_equipped(self, user_id: int) -> Sequence[InventoryItem]:
        stmt = (
            select(InventoryItem)
            .where(InventoryItem.user_id == user_id, InventoryItem.is_equipped.is_(True))
            .order_by(InventoryItem.id)
        )
        return (await self.session.scalars(stmt)).all()

    async def get(self, item_id: int) -> InventoryItem | None:
        return await self.session.get(InventoryItem, item_id)

    async def get_by_name(self, user_id: int, name: str) -> InventoryItem | None:
        """First item of the given name; items of one name stack onto a single row."""
        stmt = (
            select(InventoryItem)
            .where(InventoryItem.user_id == user_id, InventoryItem.name == name)
            .order_by(InventoryItem.id)
            .limit(1)
        )
        return (await self.session.scalars(stmt)).first()

    async def create(self, user_id: int, data: dict[str, Any]) -> InventoryItem:
        item = InventoryItem(user_id=user_id)
        apply_dict_updates(item, data, {"id", "user_id", "created_at"})
        self.session.add(item)
        await self.session.flush()
        return item

    async def update(self, item: InventoryItem, data: dict[str, Any]) -> InventoryItem:
        apply_dict_updates(item, data, {"id", "user_id", "created_at"})
        await self.session.flush()
        return item

    async def delete(self, item: InventoryItem) -> None:
        await self.session.delete(item)
        await self.session.flush()

    async def take(self, item: InventoryItem, amount: int) -> int | None:
        """
        Removes `amount` from the stack in one guarded UPDATE and returns what is left,
        or None when the stored quantity no longer covers it. An emptied stack is deleted.
        """
        stmt = (
            update(InventoryItem)
            .where(InventoryItem.id == item.id, InventoryItem.quantity >= amount)
            .values(quantity=InventoryItem.quantity - amount)
            .returning(InventoryItem.quantity)
            .execution_options(synchronize_session=False)
        )
        remaining = (await self.session.execute(stmt)).scalar_one_or_none()
        if remaining == 0:
            await self.delete(item)
        elif remaining is not None:
            await self.session.refresh(item)
        return remaining
