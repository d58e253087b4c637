import logging
import math
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from akashic.db.utils import as_utc, atomic, utc_now
from akashic.exceptions import AuthenticationRequired, NotFound, PermissionDenied, ValidationError
from akashic.models.crafting import CraftingQueueItem, CraftingRecipe, UserRecipe
from akashic.models.inventory import InventoryItem
from akashic.repositories import CraftingRepository, InventoryRepository
from akashic.services.inventory import InventoryService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngredientCheck:
    has_ingredients: bool
    missing_items: list[str] = field(default_factory=list)


def result_item_template(recipe: CraftingRecipe) -> dict:
    return {
        "name": recipe.result_item_name,
        "description": recipe.result_item_description,
        "type": recipe.result_item_type,
        "image_url": recipe.result_item_image_url,
        "rarity": recipe.result_item_rarity,
        "quantity": recipe.result_item_quantity,
        "attributes": recipe.result_item_attributes,
    }


class CraftingService:
    """
    Recipes, discoveries and the crafting queue.

    A queued job completes by the clock alone. Nothing advances it in the background:
    completion is checked, and recorded, when the user claims the result.
    """

    def __init__(
        self,
        session: AsyncSession,
        crafting_repo: CraftingRepository,
        inventory_repo: InventoryRepository,
        inventory: InventoryService,
    ):
        self._session = session
        self._crafting_repo = crafting_repo
        self._inventory_repo = inventory_repo
        self._inventory = inventory

    # --- 1. RECIPES ---

    async def list_recipes(self, user_id: int | None = None) -> list[tuple[CraftingRecipe, bool | None]]:
        """
        Signed-in users see every recipe with its discovery flag; anonymous callers
        see public recipes only, without the flag.
        """
        if user_id is None:
            return [(recipe, None) for recipe in await self._crafting_repo.list_recipes(public_only=True)]

        discovered = await self._crafting_repo.discovered_ids(user_id)
        return [(recipe, recipe.id in discovered) for recipe in await self._crafting_repo.list_recipes()]

    async def list_discovered(self, user_id: int) -> Sequence[CraftingRecipe]:
        return await self._crafting_repo.list_discovered(user_id)

    async def get_recipe(self, recipe_id: int, user_id: int | None = None) -> CraftingRecipe:
        recipe = await self._crafting_repo.get_recipe(recipe_id)
        if recipe is None:
            raise NotFound("Recipe not found")
        if not recipe.is_public:
            if user_id is None:
                raise AuthenticationRequired("Authentication required to view this recipe")
            if await self._crafting_repo.get_discovery(user_id, recipe_id) is None:
                raise PermissionDenied("Recipe not yet discovered")
        return recipe

    async def discover(self, user_id: int, recipe_id: int) -> tuple[CraftingRecipe, UserRecipe]:
        """Records the discovery once; later calls return the original record."""
        recipe = await self._crafting_repo.get_recipe(recipe_id)
        if recipe is None:
            raise NotFound("Recipe not found")

        existing = await self._crafting_repo.get_discovery(user_id, recipe_id)
        if existing is not None:
            return recipe, existing

        try:
            async with atomic(self._session):
                discovery = await self._crafting_repo.create_discovery(user_id, recipe_id)
        except IntegrityError:
            discovery = await self._crafting_repo.get_discovery(user_id, recipe_id)
            recipe = await self._crafting_repo.get_recipe(recipe_id)
        else:
            logger.info("User %d discovered recipe %r", user_id, recipe.name)
        return recipe, discovery

    # --- 2. INGREDIENTS ---

    async def _holdings(self, user_id: int) -> dict[str, list[InventoryItem]]:
        holdings: dict[str, list[InventoryItem]] = defaultdict(list)
        for item in await self._inventory_repo.list_for_user(user_id):
            holdings[item.name].append(item)
        return holdings

    @staticmethod
    def _missing(recipe: CraftingRecipe, holdings: dict[str, list[InventoryItem]]) -> list[str]:
        return [
            ingredient["item_name"]
            for ingredient in recipe.ingredients
            if sum(item.quantity for item in holdings.get(ingredient["item_name"], [])) < ingredient["quantity"]
        ]

    async def check_ingredients(self, user_id: int, recipe_id: int) -> IngredientCheck:
        recipe = await self._crafting_repo.get_recipe(recipe_id)
        if recipe is None:
            raise NotFound("Recipe not found")
        missing = self._missing(recipe, await self._holdings(user_id))
        return IngredientCheck(has_ingredients=not missing, missing_items=missing)

    async def _consume(self, recipe: CraftingRecipe, holdings: dict[str, list[InventoryItem]]) -> None:
        for ingredient in recipe.ingredients:
            needed = ingredient["quantity"]
            for item in holdings[ingredient["item_name"]]:
                if needed == 0:
                    break
                taken = min(item.quantity, needed)
                if await self._inventory_repo.take(item, taken) is None:
                    raise ValidationError("Missing required ingredients", missing_items=[ingredient["item_name"]])
                needed -= taken

    # --- 3. QUEUE ---

    async def start(self, user_id: int, recipe_id: int, now: datetime | None = None) -> CraftingQueueItem:
        """
        Consumes the ingredients and queues the job in one database transaction.

        Raises:
            NotFound: no such recipe.
            PermissionDenied: the recipe is private and not discovered by the user.
            ValidationError: ingredients are missing (listed under `missing_items`).
        """
        now = now or utc_now()
        recipe = await self._crafting_repo.get_recipe(recipe_id)
        if recipe is None:
            raise NotFound("Recipe not found")
        if not recipe.is_public and await self._crafting_repo.get_discovery(user_id, recipe_id) is None:
            raise PermissionDenied("Recipe not yet discovered")

        async with atomic(self._session):
            holdings = await self._holdings(user_id)
            missing = self._missing(recipe, holdings)
            if missing:
                raise ValidationError("Missing required ingredients", missing_items=missing)
            await self._consume(recipe, holdings)
            queue_item = await self._crafting_repo.enqueue(
                CraftingQueueItem(
                    user_id=user_id,
                    recipe_id=recipe.id,
                    started_at=now,
                    completes_at=now + timedelta(minutes=recipe.crafting_time_minutes),
                )
            )

        logger.info("User %d started crafting %r (queue item %d)", user_id, recipe.name, queue_item.id)
        return queue_item

    async def queue(self, user_id: int) -> Sequence[tuple[CraftingQueueItem, CraftingRecipe]]:
        return await self._crafting_repo.list_queue(user_id)

    async def claim(self, user_id: int, queue_id: int, now: datetime | None = None) -> InventoryItem:
        now = now or utc_now()
        queue_item = await self._crafting_repo.get_queue_item(queue_id)
        if queue_item is None:
            raise NotFound("Crafting queue item not found")
        if queue_item.user_id != user_id:
            raise PermissionDenied("You don't have permission to claim this item")

        completes_at = as_utc(queue_item.completes_at)
        if not queue_item.is_completed and now < completes_at:
            raise ValidationError(
                "Crafting not yet complete",
                completes_at=completes_at.isoformat(),
                remaining_seconds=math.ceil((completes_at - now).total_seconds()),
            )

        if queue_item.is_claimed:
            raise ValidationError("Item already claimed")

        async with atomic(self._session):
            if not await self._crafting_repo.mark_claimed(queue_id):
                raise ValidationError("Item already claimed")
            await self._session.refresh(queue_item)
            recipe = await self._crafting_repo.get_recipe(queue_item.recipe_id)
            item = await self._inventory.grant_item(user_id, result_item_template(recipe))

        logger.info("User %d claimed %r from queue item %d", user_id, item.name, queue_id)
        return item
