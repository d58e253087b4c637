from pydantic import BaseModel, Field

from akashic.models.catalog import ScrollType


class ScrollResponse(BaseModel):
    """Public view of a scroll. The unlock key is deliberately not part of it."""

    model_config = {"from_attributes": True}

    id: int
    title: str
    content: str
    image: str
    type: ScrollType
    is_locked: bool = Field(..., description="Global default lock state")
    is_unlocked: bool | None = Field(default=None, description="Per-user state; only present for signed-in users")


class UnlockRequest(BaseModel):
    key: str = Field(..., description="Key phrase supplied by the reader")


class UnlockResponse(BaseModel):
    success: bool
    scroll: ScrollResponse | None = None


class UnlockStatusResponse(BaseModel):
    is_unlocked: bool
