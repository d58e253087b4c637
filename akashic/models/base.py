from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(UTC)


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all ORM models."""

    pass


class TimestampMixin:
    """Creation and last-modification timestamps, maintained by the ORM."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, comment="Row creation time (UTC)."
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        comment="Last modification time (UTC).",
    )


class AuditMixin(TimestampMixin):
    """Timestamps plus the acting user, where one is known."""

    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True, comment="User ID that created the row.")
    updated_by: Mapped[int | None] = mapped_column(
        Integer, nullable=True, comment="User ID that last modified the row."
    )
