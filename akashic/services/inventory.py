import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from akashic.db.utils import atomic
from akashic.exceptions import NotFound, PermissionDenied, ValidationError
from akashic.models.inventory import InventoryItem, Rarity
from akashic.models.ledger import TransactionType
from akashic.models.seed import CRYSTAL_COLLECTION
from akashic.repositories import InventoryRepository
from akashic.services.ledger import LedgerService

logger = logging.getLogger(__name__)

CRYSTAL_PRICES: dict[Rarity, int] = {
    Rarity.COMMON: 50,
    Rarity.UNCOMMON: 100,
    Rarity.RARE: 200,
}


@dataclass(frozen=True)
class CrystalPurchase:
    item: InventoryItem
    price: int
    new_balance: int


def crystal_price(rarity: Rarity | str) -> int:
    return CRYSTAL_PRICES.get(Rarity(rarity), CRYSTAL_PRICES[Rarity.COMMON])


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


class InventoryService:
    def __init__(self, session: AsyncSession, inventory_repo: InventoryRepository, ledger: LedgerService):
        self._session = session
        self._inventory_repo = inventory_repo
        self._ledger = ledger

    # --- 1. QUERIES ---

    async def list_items(self, user_id: int) -> Sequence[InventoryItem]:
        return await self._inventory_repo.list_for_user(user_id)

    async def list_equipped(self, user_id: int) -> Sequence[InventoryItem]:
        return await self._inventory_repo.list_equipped(user_id)

    async def get_item(self, user_id: int, item_id: int) -> InventoryItem:
        """Ownership check: an item held by another user is never returned."""
        item = await self._inventory_repo.get(item_id)
        if item is None:
            raise NotFound("Item not found")
        if item.user_id != user_id:
            raise PermissionDenied("Not authorized to access this item")
        return item

    # --- 2. MUTATIONS ---

    async def add_item(self, user_id: int, data: dict[str, Any]) -> InventoryItem:
        async with atomic(self._session):
            item = await self._inventory_repo.create(user_id, self._normalize(data))
        logger.info("Added item %r to inventory of user %d", item.name, user_id)
        return item

    async def update_item(self, user_id: int, item_id: int, data: dict[str, Any]) -> InventoryItem:
        async with atomic(self._session):
            item = await self.get_item(user_id, item_id)
            item = await self._inventory_repo.update(item, self._normalize(data))
        return item

    async def remove_item(self, user_id: int, item_id: int) -> None:
        async with atomic(self._session):
            item = await self.get_item(user_id, item_id)
            await self._inventory_repo.delete(item)
        logger.info("Removed item %d from inventory of user %d", item_id, user_id)

    async def set_quantity(self, user_id: int, item_id: int, quantity: int) -> InventoryItem:
        if quantity < 0:
            raise ValidationError("Invalid quantity")
        return await self.update_item(user_id, item_id, {"quantity": quantity})

    async def set_equipped(self, user_id: int, item_id: int, is_equipped: bool) -> InventoryItem:
        return await self.update_item(user_id, item_id, {"is_equipped": is_equipped})

    async def grant_item(self, user_id: int, template: dict[str, Any]) -> InventoryItem:
        """
        Adds the template's quantity to the user's item of the same name, or creates it.
        Runs inside the caller's transaction boundary (no commit).
        """
        data = self._normalize(template)
        quantity = data.get("quantity", 1)
        existing = await self._inventory_repo.get_by_name(user_id, data["name"])
        if existing is not None:
            return await self._inventory_repo.update(existing, {"quantity": existing.quantity + quantity})
        return await self._inventory_repo.create(user_id, {**data, "quantity": quantity})

    # --- 3. CRYSTAL SHOP ---

    @staticmethod
    def list_crystals() -> list[dict[str, Any]]:
        return [{**crystal, "price": crystal_price(crystal["rarity"])} for crystal in CRYSTAL_COLLECTION]

    async def purchase_crystal(self, user_id: int, crystal_name: str) -> CrystalPurchase:
        """
        Spends the crystal's price and grants it in one database transaction. When the
        spend is rejected the crystal is not granted.
        """
        crystal = next((c for c in CRYSTAL_COLLECTION if c["name"] == crystal_name), None)
        if crystal is None:
            raise NotFound("Crystal not found")
        price = crystal_price(crystal["rarity"])

        async with atomic(self._session):
            transaction = await self._ledger.append(
                user_id, -price, TransactionType.SPEND, f"Purchased {crystal['name']}", reference_id=crystal["name"]
            )
            item = await self.grant_item(user_id, {**crystal, "quantity": 1})

        return CrystalPurchase(item=item, price=price, new_balance=transaction.balance_after)

    @staticmethod
    def _normalize(data: dict[str, Any]) -> dict[str, Any]:
        return {key: _enum_value(value) for key, value in data.items()}
