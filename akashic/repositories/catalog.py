from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from akashic.models.catalog import Scroll, ScrollType, UserScrollUnlock


class ScrollRepository:
    """
    Data access for the scroll catalog and the per-user unlock records.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- 1. Catalog ---

    async def list_all(self, scroll_type: ScrollType | None = None) -> Sequence[Scroll]:
        stmt = select(Scroll).order_by(Scroll.id)
        if scroll_type is not None:
            stmt = stmt.where(Scroll.type == scroll_type.value)
        return (await self.session.scalars(stmt)).all()

    async def get(self, scroll_id: int) -> Scroll | None:
        return await self.session.get(Scroll, scroll_id)

    async def create(self, **fields) -> Scroll:
        scroll = Scroll(**fields)
        self.session.add(scroll)
        await self.session.flush()
        return scroll

    # --- 2. Unlock records ---

    async def get_unlock(self, user_id: int, scroll_id: int) -> UserScrollUnlock | None:
        stmt = select(UserScrollUnlock).where(
            UserScrollUnlock.user_id == user_id, UserScrollUnlock.scroll_id == scroll_id
        )
        return (await self.session.scalars(stmt)).one_or_none()

    async def create_unlock(self, user_id: int, scroll_id: int) -> bool:
        """
        Writes the unlock row unless it already exists.

        Returns True when a row was written. A concurrent writer racing past the
        existence check is stopped by the (user_id, scroll_id) unique constraint,
        surfacing as IntegrityError on flush.
        """
        if await self.get_unlock(user_id, scroll_id) is not None:
            return False

        self.session.add(UserScrollUnlock(user_id=user_id, scroll_id=scroll_id))
        await self.session.flush()
        return True

    async def count_unlocks(self, user_id: int, scroll_id: int) -> int:
        stmt = select(UserScrollUnlock.id).where(
            UserScrollUnlock.user_id == user_id, UserScrollUnlock.scroll_id == scroll_id
        )
        return len((await self.session.scalars(stmt)).all())

    async def unlocked_ids_for_user(self, user_id: int) -> set[int]:
        stmt = select(UserScrollUnlock.scroll_id).where(UserScrollUnlock.user_id == user_id)
        return set((await self.session.scalars(stmt)).all())

    async def list_unlocked_for_user(self, user_id: int) -> Sequence[Scroll]:
        stmt = (
            select(Scroll)
            .join(UserScrollUnlock, UserScrollUnlock.scroll_id == Scroll.id)
            .where(UserScrollUnlock.user_id == user_id)
            .order_by(UserScrollUnlock.unlocked_at, Scroll.id)
        )
        return (await self.session.scalars(stmt)).all()
