import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from akashic.core.security import keys_match
from akashic.db.utils import atomic
from akashic.exceptions import InvalidKey, NotFound, ValidationError
from akashic.models.catalog import Scroll, ScrollType
from akashic.models.ledger import TransactionType
from akashic.repositories import ScrollRepository
from akashic.services.ledger import LedgerService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManaUnlockResult:
    scroll: Scroll
    charged: bool
    new_balance: int
    transaction_id: int | None = None


def parse_scroll_type(value: str | None) -> ScrollType | None:
    """Unknown or empty filter values mean "no filter"."""
    if not value:
        return None
    try:
        return ScrollType(value)
    except ValueError:
        return None


class CatalogService:
    """
    The scroll catalog and the per-user unlock state machine (Locked -> Unlocked).
    Unlocking is terminal: there is no operation that re-locks a scroll.
    """

    def __init__(self, session: AsyncSession, scroll_repo: ScrollRepository, ledger: LedgerService):
        self._session = session
        self._scroll_repo = scroll_repo
        self._ledger = ledger

    # --- 1. CATALOG ---

    async def list_scrolls(self, filter_type: str | None = None) -> Sequence[Scroll]:
        return await self._scroll_repo.list_all(parse_scroll_type(filter_type))

    async def get_scroll(self, scroll_id: int) -> Scroll:
        scroll = await self._scroll_repo.get(scroll_id)
        if scroll is None:
            raise NotFound("Scroll not found")
        return scroll

    async def is_unlocked_for_user(self, user_id: int, scroll_id: int) -> bool:
        scroll = await self.get_scroll(scroll_id)
        if not scroll.is_locked:
            return True
        return await self._scroll_repo.get_unlock(user_id, scroll_id) is not None

    async def unlock_states(self, user_id: int, scrolls: Sequence[Scroll]) -> dict[int, bool]:
        """Per-user unlock flags for a listing, in a single query."""
        unlocked = await self._scroll_repo.unlocked_ids_for_user(user_id)
        return {scroll.id: (not scroll.is_locked) or scroll.id in unlocked for scroll in scrolls}

    async def list_unlocked_for_user(self, user_id: int) -> Sequence[Scroll]:
        return await self._scroll_repo.list_unlocked_for_user(user_id)

    # --- 2. UNLOCKING ---

    async def attempt_unlock(self, user_id: int, scroll_id: int, supplied_key: str) -> Scroll:
        """
        Unlocks a scroll for a user when the supplied key matches exactly.

        Idempotent: a repeated correct attempt succeeds without writing a second row.
        A wrong key raises InvalidKey and persists nothing. No Mana is charged.
        """
        scroll = await self.get_scroll(scroll_id)
        if not supplied_key:
            raise ValidationError("Key is required")

        if not keys_match(supplied_key, scroll.unlock_key):
            logger.info("Wrong key submitted for scroll %d by user %d", scroll_id, user_id)
            raise InvalidKey()

        try:
            async with atomic(self._session):
                created = await self._scroll_repo.create_unlock(user_id, scroll_id)
        except IntegrityError:
            # A concurrent request wrote the same (user, scroll) row first.
            created = False
            scroll = await self.get_scroll(scroll_id)

        if created:
            logger.info("Scroll %d unlocked for user %d", scroll_id, user_id)
        return scroll

    async def unlock_with_mana(self, user_id: int, scroll_id: int, cost: int) -> ManaUnlockResult:
        """
        Spends `cost` Mana and unlocks the scroll in the same database transaction.
        Nothing is charged when the user already holds the unlock.
        """
        if isinstance(cost, bool) or not isinstance(cost, int) or cost <= 0:
            raise ValidationError("Invalid amount")
        scroll = await self.get_scroll(scroll_id)
        if await self._scroll_repo.get_unlock(user_id, scroll_id) is not None:
            return ManaUnlockResult(scroll=scroll, charged=False, new_balance=await self._ledger.get_balance(user_id))

        try:
            async with atomic(self._session):
                created = await self._scroll_repo.create_unlock(user_id, scroll_id)
                if created:
                    transaction = await self._ledger.append(
                        user_id,
                        -cost,
                        TransactionType.SPEND,
                        f"Spent {cost} mana to unlock a scroll",
                        reference_id=str(scroll_id),
                    )
        except IntegrityError:
            # Lost the race to a concurrent unlock; nothing was charged.
            created = False
            scroll = await self.get_scroll(scroll_id)

        if not created:
            return ManaUnlockResult(scroll=scroll, charged=False, new_balance=await self._ledger.get_balance(user_id))

        logger.info("Scroll %d unlocked for user %d with %d Mana", scroll_id, user_id, cost)
        return ManaUnlockResult(
            scroll=scroll, charged=True, new_balance=transaction.balance_after, transaction_id=transaction.id
        )
