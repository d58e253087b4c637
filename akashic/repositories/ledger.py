from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from akashic.models.ledger import ManaPackage, ManaTransaction


class LedgerRepository:
    """
    Manages data access for the append-only ManaTransaction table and the
    ManaPackage configuration. Rows are added and read; never updated or deleted.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- 1. CORE FACT RECORDING ---

    async def record(self, transaction: ManaTransaction) -> ManaTransaction:
        """
        Appends one ledger entry. The balance cache must be moved by the caller
        inside the same database transaction.
        """
        self.session.add(transaction)
        await self.session.flush()
        return transaction

    # --- 2. AUDIT AND RETRIEVAL ---

    async def list_for_user(self, user_id: int, limit: int | None = None) -> Sequence[ManaTransaction]:
        """Newest first; ties on created_at are broken by insertion order."""
        stmt = (
            select(ManaTransaction)
            .where(ManaTransaction.user_id == user_id)
            .order_by(ManaTransaction.created_at.desc(), ManaTransaction.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return (await self.session.scalars(stmt)).all()

    async def sum_for_user(self, user_id: int) -> int:
        """The balance as derived from the log alone, used for reconciliation."""
        stmt = select(func.coalesce(func.sum(ManaTransaction.amount), 0)).where(ManaTransaction.user_id == user_id)
        return int(await self.session.scalar(stmt) or 0)

    async def count_for_user(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(ManaTransaction).where(ManaTransaction.user_id == user_id)
        return int(await self.session.scalar(stmt) or 0)

    # --- 3. PACKAGES (Configuration) ---

    async def list_active_packages(self) -> Sequence[ManaPackage]:
        stmt = select(ManaPackage).where(ManaPackage.is_active.is_(True)).order_by(ManaPackage.amount)
        return (await self.session.scalars(stmt)).all()

    async def get_package(self, package_id: int) -> ManaPackage | None:
        return await self.session.get(ManaPackage, package_id)
