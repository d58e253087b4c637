import pytest

from akashic.exceptions import InsufficientBalance, InvalidKey, NotFound, ValidationError
from akashic.repositories import LedgerRepository, ScrollRepository

INNER_ALCHEMY = 7
CELESTIAL_CYCLES = 6


class TestCatalogQuery:
    """Listing and filtering the scroll catalog."""

    async def test_lists_seeded_catalog_in_id_order(self, services):
        scrolls = await services.catalog.list_scrolls()

        assert [s.id for s in scrolls] == [1, 2, 3, 4, 5, 6, 7]
        assert [s.is_locked for s in scrolls] == [False] * 5 + [True] * 2

    async def test_filter_by_type_returns_only_that_type(self, services):
        tablets = await services.catalog.list_scrolls("tablet")

        assert {s.title for s in tablets} == {"Origins", "Legacy of the Lost Age"}
        assert all(s.type == "tablet" for s in tablets)

    @pytest.mark.parametrize("filter_type", [None, "", "all", "grimoire"])
    async def test_unknown_or_absent_type_returns_everything(self, services, filter_type):
        assert len(await services.catalog.list_scrolls(filter_type)) == 7

    async def test_missing_scroll(self, services):
        with pytest.raises(NotFound):
            await services.catalog.get_scroll(99)

    async def test_globally_unlocked_scroll_is_readable_without_key(self, services, user_id):
        assert await services.catalog.is_unlocked_for_user(user_id, 1)
        assert not await services.catalog.is_unlocked_for_user(user_id, INNER_ALCHEMY)

    async def test_unlock_states_for_listing(self, services, user_id):
        await services.catalog.attempt_unlock(user_id, INNER_ALCHEMY, "WISDOM")
        scrolls = await services.catalog.list_scrolls()

        states = await services.catalog.unlock_states(user_id, scrolls)

        assert states[INNER_ALCHEMY] is True
        assert states[CELESTIAL_CYCLES] is False
        assert states[1] is True


class TestAttemptUnlock:
    """The Locked -> Unlocked state machine."""

    async def test_wrong_key_changes_nothing(self, services, session, user_id):
        with pytest.raises(InvalidKey) as excinfo:
            await services.catalog.attempt_unlock(user_id, INNER_ALCHEMY, "X")

        assert "WISDOM" not in str(excinfo.value.to_dict())
        assert await ScrollRepository(session).count_unlocks(user_id, INNER_ALCHEMY) == 0
        assert not await services.catalog.is_unlocked_for_user(user_id, INNER_ALCHEMY)
        assert await LedgerRepository(session).count_for_user(user_id) == 1

    async def test_key_comparison_is_case_sensitive(self, services, user_id):
        with pytest.raises(InvalidKey):
            await services.catalog.attempt_unlock(user_id, INNER_ALCHEMY, "wisdom")

    async def test_empty_key(self, services, user_id):
        with pytest.raises(ValidationError):
            await services.catalog.attempt_unlock(user_id, INNER_ALCHEMY, "")

    async def test_missing_scroll(self, services, user_id):
        with pytest.raises(NotFound):
            await services.catalog.attempt_unlock(user_id, 99, "WISDOM")

    async def test_correct_key_unlocks_exactly_once(self, services, session, user_id):
        first = await services.catalog.attempt_unlock(user_id, INNER_ALCHEMY, "WISDOM")
        second = await services.catalog.attempt_unlock(user_id, INNER_ALCHEMY, "WISDOM")

        assert first.id == second.id == INNER_ALCHEMY
        assert await ScrollRepository(session).count_unlocks(user_id, INNER_ALCHEMY) == 1
        assert [s.id for s in await services.catalog.list_unlocked_for_user(user_id)] == [INNER_ALCHEMY]

    async def test_unlock_costs_no_mana(self, services, user_id):
        await services.catalog.attempt_unlock(user_id, INNER_ALCHEMY, "WISDOM")

        assert await services.ledger.get_balance(user_id) == 50

    async def test_unlocks_are_per_user(self, services, user_id):
        other = await services.users.register("scribe", "scribe@example.com", "another secret")
        other_id = other.id

        await services.catalog.attempt_unlock(user_id, INNER_ALCHEMY, "WISDOM")

        assert not await services.catalog.is_unlocked_for_user(other_id, INNER_ALCHEMY)

    async def test_lost_race_returns_scroll_without_second_row(self, services, session, user_id, monkeypatch):
        await services.catalog.attempt_unlock(user_id, INNER_ALCHEMY, "WISDOM")

        # A racer that checked before the first unlock committed sees no row.
        async def no_unlock(self, user_id, scroll_id):
            return None

        monkeypatch.setattr(ScrollRepository, "get_unlock", no_unlock)
        scroll = await services.catalog.attempt_unlock(user_id, INNER_ALCHEMY, "WISDOM")

        assert scroll.id == INNER_ALCHEMY
        assert await ScrollRepository(session).count_unlocks(user_id, INNER_ALCHEMY) == 1


class TestUnlockWithMana:
    """Spending Mana to unlock a scroll."""

    async def test_charges_and_unlocks_together(self, services, session, user_id):
        result = await services.catalog.unlock_with_mana(user_id, CELESTIAL_CYCLES, 30)

        assert result.charged
        assert result.new_balance == 20
        assert await services.catalog.is_unlocked_for_user(user_id, CELESTIAL_CYCLES)
        assert await ScrollRepository(session).count_unlocks(user_id, CELESTIAL_CYCLES) == 1

    async def test_already_unlocked_is_not_charged_again(self, services, user_id):
        await services.catalog.unlock_with_mana(user_id, CELESTIAL_CYCLES, 30)

        result = await services.catalog.unlock_with_mana(user_id, CELESTIAL_CYCLES, 30)

        assert not result.charged
        assert result.transaction_id is None
        assert result.new_balance == 20

    async def test_insufficient_balance_leaves_scroll_locked(self, services, session, user_id):
        with pytest.raises(InsufficientBalance):
            await services.catalog.unlock_with_mana(user_id, CELESTIAL_CYCLES, 80)

        assert await services.ledger.get_balance(user_id) == 50
        assert await ScrollRepository(session).count_unlocks(user_id, CELESTIAL_CYCLES) == 0

    async def test_lost_race_rolls_back_the_charge(self, services, session, user_id, monkeypatch):
        await services.catalog.unlock_with_mana(user_id, CELESTIAL_CYCLES, 10)

        async def no_unlock(self, user_id, scroll_id):
            return None

        monkeypatch.setattr(ScrollRepository, "get_unlock", no_unlock)
        result = await services.catalog.unlock_with_mana(user_id, CELESTIAL_CYCLES, 10)

        assert not result.charged
        assert result.scroll.id == CELESTIAL_CYCLES
        assert result.new_balance == 40
        assert await LedgerRepository(session).sum_for_user(user_id) == 40
        assert await ScrollRepository(session).count_unlocks(user_id, CELESTIAL_CYCLES) == 1


class TestArchiveScenario:
    """Register, fail and succeed an unlock, then spend until refused."""

    async def test_wisdom_scenario(self, services, session):
        user = await services.users.register("initiate", "initiate@example.com", "the long way round")
        user_id = user.id
        assert await services.ledger.get_balance(user_id) == 50

        with pytest.raises(InvalidKey):
            await services.catalog.attempt_unlock(user_id, INNER_ALCHEMY, "X")
        assert await services.ledger.get_balance(user_id) == 50
        assert not await services.catalog.is_unlocked_for_user(user_id, INNER_ALCHEMY)

        await services.catalog.attempt_unlock(user_id, INNER_ALCHEMY, "WISDOM")
        assert await services.catalog.is_unlocked_for_user(user_id, INNER_ALCHEMY)
        assert await services.ledger.get_balance(user_id) == 50

        await services.ledger.spend(user_id, 30, "Spent 30 mana to access content")
        assert await services.ledger.get_balance(user_id) == 20

        with pytest.raises(InsufficientBalance):
            await services.ledger.spend(user_id, 25, "Spent 25 mana to access content")
        assert await services.ledger.get_balance(user_id) == 20
        assert (await services.ledger.reconcile(user_id)).drift == 0
