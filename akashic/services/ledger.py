import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from akashic.db.utils import atomic
from akashic.exceptions import InsufficientBalance, NotFound, ValidationError
from akashic.models.ledger import ManaPackage, ManaTransaction, TransactionType
from akashic.repositories import LedgerRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationReport:
    user_id: int
    cached_balance: int
    ledger_sum: int

    @property
    def drift(self) -> int:
        return self.cached_balance - self.ledger_sum


@dataclass(frozen=True)
class PurchaseResult:
    amount: int
    new_balance: int
    transaction_id: int


class LedgerService:
    """
    The Mana ledger: an append-only transaction log plus a running balance
    counter on the user row, always moved together inside one database transaction.
    """

    def __init__(self, session: AsyncSession, user_repo: UserRepository, ledger_repo: LedgerRepository):
        self._session = session
        self._user_repo = user_repo
        self._ledger_repo = ledger_repo

    # --- 1. RECORDING ---

    async def append(
        self,
        user_id: int,
        amount: int,
        transaction_type: TransactionType | str,
        description: str,
        reference_id: str | None = None,
        stripe_payment_intent_id: str | None = None,
    ) -> ManaTransaction:
        """
        Applies one ledger entry inside the caller's transaction boundary (no commit).

        Raises:
            ValidationError: amount is not a non-zero integer, or the type is unknown.
            NotFound: the user does not exist.
            InsufficientBalance: a debit would take the balance below zero. Nothing is written.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount == 0:
            raise ValidationError("Amount must be a non-zero integer.")
        try:
            transaction_type = TransactionType(transaction_type)
        except ValueError:
            raise ValidationError(f"Unknown transaction type: {transaction_type!r}.") from None

        new_balance = await self._user_repo.apply_balance_delta(user_id, amount)
        if new_balance is None:
            current = await self._user_repo.get_balance(user_id)
            if current is None:
                raise NotFound("User not found")
            logger.info("Rejected %s of %d for user %d: balance %d", transaction_type.value, amount, user_id, current)
            raise InsufficientBalance(required=-amount, balance=current)

        transaction = await self._ledger_repo.record(
            ManaTransaction(
                user_id=user_id,
                amount=amount,
                transaction_type=transaction_type.value,
                description=description,
                reference_id=reference_id,
                stripe_payment_intent_id=stripe_payment_intent_id,
                balance_after=new_balance,
            )
        )
        logger.info(
            "Recorded %s of %d for user %d (balance now %d)", transaction_type.value, amount, user_id, new_balance
        )
        return transaction

    async def record_transaction(
        self,
        user_id: int,
        amount: int,
        transaction_type: TransactionType | str,
        description: str,
        reference_id: str | None = None,
        stripe_payment_intent_id: str | None = None,
    ) -> int:
        """Records one entry as its own unit of work and returns the new balance."""
        async with atomic(self._session):
            transaction = await self.append(
                user_id, amount, transaction_type, description, reference_id, stripe_payment_intent_id
            )
        return transaction.balance_after

    async def spend(
        self, user_id: int, amount: int, description: str, reference_id: str | None = None
    ) -> ManaTransaction:
        """Debits a positive amount of Mana. Rejected (and not persisted) when funds are short."""
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError("Invalid amount")
        async with atomic(self._session):
            return await self.append(user_id, -amount, TransactionType.SPEND, description, reference_id)

    # --- 2. QUERIES ---

    async def get_balance(self, user_id: int) -> int:
        balance = await self._user_repo.get_balance(user_id)
        if balance is None:
            raise NotFound("User not found")
        return balance

    async def list_transactions(self, user_id: int, limit: int | None = None) -> Sequence[ManaTransaction]:
        return await self._ledger_repo.list_for_user(user_id, limit)

    # --- 3. RECONCILIATION ---

    async def reconcile(self, user_id: int) -> ReconciliationReport:
        """
        Compares the running counter with the sum of the log. Reports only; drift
        is never corrected automatically.
        """
        cached = await self.get_balance(user_id)
        report = ReconciliationReport(
            user_id=user_id, cached_balance=cached, ledger_sum=await self._ledger_repo.sum_for_user(user_id)
        )
        if report.drift:
            logger.warning(
                "Ledger drift for user %d: cached %d, ledger %d", user_id, report.cached_balance, report.ledger_sum
            )
        return report

    async def reconcile_all(self) -> list[ReconciliationReport]:
        return [await self.reconcile(user_id) for user_id in await self._user_repo.list_ids()]

    # --- 4. MANA PACKAGES ---

    async def list_packages(self) -> Sequence[ManaPackage]:
        return await self._ledger_repo.list_active_packages()

    async def get_package(self, package_id: int) -> ManaPackage:
        package = await self._ledger_repo.get_package(package_id)
        if package is None or not package.is_active:
            raise NotFound("Mana package not found")
        return package

    async def purchase_package(self, user_id: int, package_id: int) -> PurchaseResult:
        """
        Direct purchase: credits the package's Mana without an external payment step.
        """
        package = await self.get_package(package_id)

        async with atomic(self._session):
            transaction = await self.append(
                user_id,
                package.amount,
                TransactionType.PURCHASE,
                f"Purchased {package.amount} Mana",
                reference_id=str(package.id),
                stripe_payment_intent_id=f"direct_{int(time.time() * 1000)}",
            )

        return PurchaseResult(
            amount=package.amount, new_balance=transaction.balance_after, transaction_id=transaction.id
        )
