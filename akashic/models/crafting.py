from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, utc_now
from .definitions import User
from .inventory import ItemType, Rarity


class CraftingRecipe(Base, TimestampMixin):
    """
    The Crafting Recipe Table (T_CraftingRecipe).
    Ingredients are a JSON list of {"item_name": str, "quantity": int}, matched
    against inventory items by name.
    """

    __tablename__ = "crafting_recipes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    ingredients: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    crafting_time_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    is_public: Mapped[bool] = mapped_column(default=True, comment="Private recipes must be discovered first.")

    # --- Result Item ---
    result_item_name: Mapped[str] = mapped_column(String(100), nullable=False)
    result_item_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    result_item_type: Mapped[ItemType] = mapped_column(String(20), nullable=False, default=ItemType.ARTIFACT)
    result_item_image_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    result_item_rarity: Mapped[Rarity] = mapped_column(String(20), nullable=False, default=Rarity.COMMON)
    result_item_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    result_item_attributes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


class UserRecipe(Base):
    """Recipes a user has discovered. One row per (user, recipe)."""

    __tablename__ = "user_recipes"
    __table_args__ = (UniqueConstraint("user_id", "recipe_id", name="uq_user_recipes_user_recipe"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey(User.id), nullable=False, index=True)
    recipe_id: Mapped[int] = mapped_column(ForeignKey(CraftingRecipe.id), nullable=False, index=True)
    discovered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)


class CraftingQueueItem(Base):
    """
    A crafting job. Completion is resolved lazily when the user claims it; there
    is no scheduler advancing the queue.
    """

    __tablename__ = "crafting_queue"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey(User.id), nullable=False, index=True)
    recipe_id: Mapped[int] = mapped_column(ForeignKey(CraftingRecipe.id), nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    completes_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_completed: Mapped[bool] = mapped_column(default=False)
    is_claimed: Mapped[bool] = mapped_column(default=False)
