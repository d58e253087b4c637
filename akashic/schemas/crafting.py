from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .inventory import ItemResponse


class Ingredient(BaseModel):
    item_name: str
    quantity: int = Field(..., gt=0)


class RecipeResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    description: str
    ingredients: list[Ingredient]
    crafting_time_minutes: int
    is_public: bool
    result_item_name: str
    result_item_description: str
    result_item_type: str
    result_item_image_url: str | None = None
    result_item_rarity: str
    result_item_quantity: int
    result_item_attributes: dict[str, Any] | None = None
    is_discovered: bool | None = Field(default=None, description="Only present for signed-in users")


class DiscoverResponse(BaseModel):
    message: str
    recipe: RecipeResponse
    discovered_at: datetime


class IngredientCheckResponse(BaseModel):
    has_ingredients: bool
    missing_items: list[str] = Field(default_factory=list)


class StartCraftingRequest(BaseModel):
    recipe_id: int = Field(..., gt=0)


class QueueItemResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    recipe_id: int
    recipe_name: str | None = None
    started_at: datetime
    completes_at: datetime
    is_completed: bool
    is_claimed: bool


class StartCraftingResponse(BaseModel):
    message: str
    queue_item: QueueItemResponse
    completes_at: datetime


class ClaimResponse(BaseModel):
    message: str
    item: ItemResponse
