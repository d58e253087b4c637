from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from akashic.models.base import utc_now

__all__ = ["apply_dict_updates", "as_utc", "atomic", "utc_now"]

T = TypeVar("T")


def apply_dict_updates(entity: T, update_data: dict[str, Any], excluded_attrs: set[str] | None) -> T:
    """
    Dynamically applies key-value pairs from a dictionary to a type-safe ORM entity.

    Args:
        entity: The SQLAlchemy ORM object loaded into the session. Type is inferred as T.
        update_data: Dictionary of fields and values to update.
        excluded_attrs: Attribute names to explicitly ignore/skip updating.
    """
    excluded_attrs = excluded_attrs if excluded_attrs else set()
    for key, value in update_data.items():

        if key in excluded_attrs:
            continue

        if hasattr(entity, key):
            setattr(entity, key, value)

    return entity


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Transaction boundary for one Service Layer operation.

    Commits when the block exits cleanly and rolls back on any error. Reads issued
    before entering (which autobegin a transaction) become part of the same unit.
    """
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        raise


def as_utc(value: datetime) -> datetime:
    """SQLite hands timestamps back naive; they are always stored as UTC."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
