from datetime import datetime
from enum import Enum as PyEnum

from pydantic import BaseModel, Field

from akashic.models.ledger import TransactionType


class SpendPurpose(str, PyEnum):
    SCROLL_UNLOCK = "scroll_unlock"
    CONTENT_ACCESS = "content_access"


class BalanceResponse(BaseModel):
    balance: int


class TransactionResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    amount: int = Field(..., description="Signed delta: positive = credit, negative = debit")
    transaction_type: TransactionType
    description: str
    reference_id: str | None = None
    balance_after: int
    created_at: datetime


class SpendRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Mana to spend")
    purpose: SpendPurpose = Field(default=SpendPurpose.CONTENT_ACCESS)
    scroll_id: int | None = Field(default=None, description="Scroll to unlock when purpose is scroll_unlock")


class SpendResponse(BaseModel):
    transaction_id: int | None = Field(default=None, description="None when nothing was charged")
    new_balance: int


class PackageResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    description: str
    amount: int = Field(..., description="Mana credited")
    price: int = Field(..., description="Price in cents")
    is_active: bool


class PurchaseRequest(BaseModel):
    package_id: int = Field(..., gt=0)


class PurchaseResponse(BaseModel):
    success: bool = True
    message: str
    amount: int
    new_balance: int
    transaction_id: int

