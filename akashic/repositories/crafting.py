from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from akashic.models.crafting import CraftingQueueItem, CraftingRecipe, UserRecipe


class CraftingRepository:
    """Data access for recipes, per-user discoveries and the crafting queue."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- 1. Recipes ---

    async def list_recipes(self, public_only: bool = False) -> Sequence[CraftingRecipe]:
        stmt = select(CraftingRecipe).order_by(CraftingRecipe.id)
        if public_only:
            stmt = stmt.where(CraftingRecipe.is_public.is_(True))
        return (await self.session.scalars(stmt)).all()

    async def get_recipe(self, recipe_id: int) -> CraftingRecipe | None:
        return await self.session.get(CraftingRecipe, recipe_id)

    # --- 2. Discoveries ---

    async def discovered_ids(self, user_id: int) -> set[int]:
        stmt = select(UserRecipe.recipe_id).where(UserRecipe.user_id == user_id)
        return set((await self.session.scalars(stmt)).all())

    async def list_discovered(self, user_id: int) -> Sequence[CraftingRecipe]:
        stmt = (
            select(CraftingRecipe)
            .join(UserRecipe, UserRecipe.recipe_id == CraftingRecipe.id)
            .where(UserRecipe.user_id == user_id)
            .order_by(CraftingRecipe.id)
        )
        return (await self.session.scalars(stmt)).all()

    async def get_discovery(self, user_id: int, recipe_id: int) -> UserRecipe | None:
        stmt = select(UserRecipe).where(UserRecipe.user_id == user_id, UserRecipe.recipe_id == recipe_id)
        return (await self.session.scalars(stmt)).one_or_none()

    async def create_discovery(self, user_id: int, recipe_id: int) -> UserRecipe:
        discovery = UserRecipe(user_id=user_id, recipe_id=recipe_id)
        self.session.add(discovery)
        await self.session.flush()
        return discovery

    # --- 3. Queue ---

    async def enqueue(self, item: CraftingQueueItem) -> CraftingQueueItem:
        self.session.add(item)
        await self.session.flush()
        return item

    async def get_queue_item(self, queue_id: int) -> CraftingQueueItem | None:
        return await self.session.get(CraftingQueueItem, queue_id)

    async def list_queue(self, user_id: int) -> Sequence[tuple[CraftingQueueItem, CraftingRecipe]]:
        stmt = (
            select(CraftingQueueItem, CraftingRecipe)
            .join(CraftingRecipe, CraftingRecipe.id == CraftingQueueItem.recipe_id)
            .where(CraftingQueueItem.user_id == user_id)
            .order_by(CraftingQueueItem.started_at, CraftingQueueItem.id)
        )
        return [(row[0], row[1]) for row in (await self.session.execute(stmt)).all()]

    async def mark_claimed(self, queue_id: int) -> bool:
        """
        Flags the job completed and claimed unless a claim already landed.
        False means another request claimed it first. Loaded objects are not synchronized.
        """
        stmt = (
            update(CraftingQueueItem)
            .where(CraftingQueueItem.id == queue_id, CraftingQueueItem.is_claimed.is_(False))
            .values(is_claimed=True, is_completed=True)
            .returning(CraftingQueueItem.id)
            .execution_options(synchronize_session=False)
        )
        return (await self.session.execute(stmt)).scalar_one_or_none() is not None
