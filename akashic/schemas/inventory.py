from typing import Any

from pydantic import BaseModel, Field

from akashic.models.inventory import ItemType, Rarity


class ItemCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="")
    type: ItemType = Field(default=ItemType.OTHER)
    image_url: str | None = None
    rarity: Rarity = Field(default=Rarity.COMMON)
    quantity: int = Field(default=1, ge=0)
    is_equipped: bool = False
    uses_left: int | None = Field(default=None, ge=0)
    attributes: dict[str, Any] | None = None


class ItemUpdateRequest(BaseModel):
    """Partial update; only the fields that are sent are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    type: ItemType | None = None
    image_url: str | None = None
    rarity: Rarity | None = None
    quantity: int | None = Field(default=None, ge=0)
    is_equipped: bool | None = None
    uses_left: int | None = Field(default=None, ge=0)
    attributes: dict[str, Any] | None = None


class QuantityRequest(BaseModel):
    quantity: int = Field(..., ge=0)


class EquipRequest(BaseModel):
    is_equipped: bool


class ItemResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    name: str
    description: str
    type: str
    image_url: str | None = None
    rarity: str
    quantity: int
    is_equipped: bool
    uses_left: int | None = None
    attributes: dict[str, Any] | None = None


class CrystalResponse(BaseModel):
    name: str
    description: str
    type: str
    image_url: str | None = None
    rarity: str
    price: int = Field(..., description="Price in Mana")
    attributes: dict[str, Any] | None = None


class CrystalPurchaseRequest(BaseModel):
    crystal_name: str = Field(..., min_length=1)


class CrystalPurchaseResponse(BaseModel):
    success: bool = True
    message: str
    new_balance: int
    item: ItemResponse
