from enum import Enum as PyEnum
from typing import Any

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin
from .definitions import User


class ItemType(str, PyEnum):
    ARTIFACT = "artifact"
    KEY = "key"
    RESOURCE = "resource"
    RELIC = "relic"
    SCROLL = "scroll"
    BOOK = "book"
    AMULET = "amulet"
    ELIXIR = "elixir"
    WISDOM = "wisdom"
    CODEX = "codex"
    TABLET = "tablet"
    CRYSTAL = "crystal"
    OTHER = "other"


class Rarity(str, PyEnum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"
    MYTHIC = "mythic"
    DIVINE = "divine"


class InventoryItem(Base, TimestampMixin):
    """An item held by a user. Items with the same name stack by quantity."""

    __tablename__ = "inventory_items"
    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_inventory_items_quantity_non_negative"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey(User.id), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[ItemType] = mapped_column(String(20), nullable=False, default=ItemType.OTHER)
    image_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    rarity: Mapped[Rarity] = mapped_column(String(20), nullable=False, default=Rarity.COMMON)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_equipped: Mapped[bool] = mapped_column(default=False)
    uses_left: Mapped[int | None] = mapped_column(Integer, nullable=True)
    attributes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
