from datetime import UTC, datetime, timedelta

import pytest

from akashic.exceptions import AuthenticationRequired, NotFound, PermissionDenied, ValidationError
from akashic.repositories import CraftingRepository

START = datetime(2026, 3, 20, 12, 0, tzinfo=UTC)

RESONANT_AMULET = 1
ELIXIR = 2
CODEX = 3


async def _holdings(services, user_id: int) -> dict[str, int]:
    return {item.name: item.quantity for item in await services.inventory.list_items(user_id)}


class TestRecipes:
    """Recipe visibility and discovery."""

    async def test_anonymous_sees_public_recipes_only(self, services):
        recipes = await services.crafting.list_recipes()

        assert [recipe.name for recipe, _ in recipes] == ["Resonant Amulet", "Elixir of Remembrance"]
        assert all(flag is None for _, flag in recipes)

    async def test_signed_in_sees_all_with_discovery_flag(self, services, user_id):
        await services.crafting.discover(user_id, CODEX)

        flags = {recipe.name: flag for recipe, flag in await services.crafting.list_recipes(user_id)}

        assert flags == {"Resonant Amulet": False, "Elixir of Remembrance": False, "Codex of the Seven Sages": True}

    async def test_private_recipe_visibility(self, services, user_id):
        with pytest.raises(AuthenticationRequired):
            await services.crafting.get_recipe(CODEX)
        with pytest.raises(PermissionDenied):
            await services.crafting.get_recipe(CODEX, user_id)

        await services.crafting.discover(user_id, CODEX)

        assert (await services.crafting.get_recipe(CODEX, user_id)).name == "Codex of the Seven Sages"

    async def test_discover_is_idempotent(self, services, user_id):
        _, first = await services.crafting.discover(user_id, CODEX)
        _, second = await services.crafting.discover(user_id, CODEX)

        assert first.id == second.id
        assert [r.id for r in await services.crafting.list_discovered(user_id)] == [CODEX]

    async def test_discover_missing_recipe(self, services, user_id):
        with pytest.raises(NotFound):
            await services.crafting.discover(user_id, 99)

    async def test_lost_discovery_race_returns_existing_record(self, services, user_id, monkeypatch):
        _, first = await services.crafting.discover(user_id, CODEX)
        first_id = first.id
        get_discovery = CraftingRepository.get_discovery
        calls = []

        # Only the pre-check misses the committed row; the recovery read sees it.
        async def stale_then_real(self, user_id, recipe_id):
            calls.append(recipe_id)
            if len(calls) == 1:
                return None
            return await get_discovery(self, user_id, recipe_id)

        monkeypatch.setattr(CraftingRepository, "get_discovery", stale_then_real)
        recipe, second = await services.crafting.discover(user_id, CODEX)

        assert recipe.id == CODEX
        assert second.id == first_id
        assert len(calls) == 2


class TestIngredients:
    """Ingredient checks against the inventory."""

    async def test_starter_items_cover_the_amulet(self, services, user_id):
        check = await services.crafting.check_ingredients(user_id, RESONANT_AMULET)

        assert check.has_ingredients
        assert check.missing_items == []

    async def test_reports_missing_items(self, services, user_id):
        check = await services.crafting.check_ingredients(user_id, ELIXIR)

        assert not check.has_ingredients
        assert check.missing_items == ["Fire Crystal"]


class TestCraftingQueue:
    """Starting, waiting for, and claiming a crafting job."""

    async def test_start_consumes_ingredients(self, services, user_id):
        queue_item = await services.crafting.start(user_id, RESONANT_AMULET, now=START)

        assert queue_item.completes_at == START + timedelta(minutes=5)
        holdings = await _holdings(services, user_id)
        assert holdings["Crystal Fragment"] == 1
        # Quantity reached zero, so the item is gone.
        assert "Quartz Crystal" not in holdings

    async def test_start_without_ingredients(self, services, user_id):
        with pytest.raises(ValidationError) as excinfo:
            await services.crafting.start(user_id, ELIXIR, now=START)

        assert excinfo.value.extra["missing_items"] == ["Fire Crystal"]
        assert (await _holdings(services, user_id))["Crystal Fragment"] == 3

    async def test_undiscovered_private_recipe(self, services, user_id):
        with pytest.raises(PermissionDenied):
            await services.crafting.start(user_id, CODEX, now=START)

        await services.crafting.discover(user_id, CODEX)
        await services.crafting.start(user_id, CODEX, now=START)

        holdings = await _holdings(services, user_id)
        assert "Crystal Tablet of Enki" not in holdings
        assert "Book of the Apkallu" not in holdings

    async def test_claim_before_completion(self, services, user_id):
        queue_id = (await services.crafting.start(user_id, RESONANT_AMULET, now=START)).id

        with pytest.raises(ValidationError) as excinfo:
            await services.crafting.claim(user_id, queue_id, now=START + timedelta(minutes=4))

        assert excinfo.value.detail == "Crafting not yet complete"
        assert excinfo.value.extra["remaining_seconds"] == 60

    async def test_claim_grants_result_once(self, services, user_id):
        queue_id = (await services.crafting.start(user_id, RESONANT_AMULET, now=START)).id
        later = START + timedelta(minutes=5)

        item = await services.crafting.claim(user_id, queue_id, now=later)

        assert item.name == "Resonant Amulet"
        assert item.type == "amulet"
        queue = await services.crafting.queue(user_id)
        assert [(q.is_completed, q.is_claimed, recipe.name) for q, recipe in queue] == [
            (True, True, "Resonant Amulet")
        ]
        with pytest.raises(ValidationError):
            await services.crafting.claim(user_id, queue_id, now=later)
        assert (await _holdings(services, user_id))["Resonant Amulet"] == 1

    async def test_claim_someone_elses_job(self, services, user_id):
        queue_id = (await services.crafting.start(user_id, RESONANT_AMULET, now=START)).id
        other = await services.users.register("scribe", "scribe@example.com", "another secret")

        with pytest.raises(PermissionDenied):
            await services.crafting.claim(other.id, queue_id, now=START + timedelta(hours=1))

    async def test_claim_missing_job(self, services, user_id):
        with pytest.raises(NotFound):
            await services.crafting.claim(user_id, 1234)
