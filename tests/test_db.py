import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from akashic.db.utils import atomic
from akashic.models import ManaPackage


async def _package_count(session) -> int:
    return await session.scalar(select(func.count()).select_from(ManaPackage))


class TestAtomic:
    """The transaction boundary every service operation runs in."""

    async def test_commits_on_clean_exit(self, database, session):
        async with atomic(session):
            session.add(ManaPackage(name="Pilgrim Pack", amount=5, price=99))

        async with database.sessionmaker() as other:
            assert await _package_count(other) == 5

    async def test_failed_commit_leaves_session_usable(self, session):
        # Nothing flushes inside the block; the duplicate name surfaces at commit.
        with pytest.raises(IntegrityError):
            async with atomic(session):
                session.add(ManaPackage(name="Novice Pack", amount=5, price=99))

        assert await _package_count(session) == 4
