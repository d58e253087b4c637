from fastapi import APIRouter, status

from akashic.api.deps import CurrentUser, OptionalUser, ServicesDep
from akashic.schemas import (
    ClaimResponse,
    DiscoverResponse,
    IngredientCheckResponse,
    ItemResponse,
    QueueItemResponse,
    RecipeResponse,
    StartCraftingRequest,
    StartCraftingResponse,
)

router = APIRouter(tags=["crafting"])


@router.get("/crafting/recipes", response_model=list[RecipeResponse])
async def list_recipes(services: ServicesDep, user: OptionalUser):
    recipes = await services.crafting.list_recipes(user.id if user is not None else None)
    return [
        RecipeResponse.model_validate(recipe).model_copy(update={"is_discovered": discovered})
        for recipe, discovered in recipes
    ]


@router.get("/crafting/recipes/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(recipe_id: int, services: ServicesDep, user: OptionalUser):
    return await services.crafting.get_recipe(recipe_id, user.id if user is not None else None)


@router.get("/user/crafting/recipes", response_model=list[RecipeResponse])
async def list_discovered(user: CurrentUser, services: ServicesDep):
    recipes = await services.crafting.list_discovered(user.id)
    return [RecipeResponse.model_validate(recipe).model_copy(update={"is_discovered": True}) for recipe in recipes]


@router.post(
    "/user/crafting/discover/{recipe_id}", response_model=DiscoverResponse, status_code=status.HTTP_201_CREATED
)
async def discover_recipe(recipe_id: int, user: CurrentUser, services: ServicesDep):
    recipe, discovery = await services.crafting.discover(user.id, recipe_id)
    return DiscoverResponse(
        message="Recipe discovered",
        recipe=RecipeResponse.model_validate(recipe).model_copy(update={"is_discovered": True}),
        discovered_at=discovery.discovered_at,
    )


@router.get("/user/crafting/check-ingredients/{recipe_id}", response_model=IngredientCheckResponse)
async def check_ingredients(recipe_id: int, user: CurrentUser, services: ServicesDep):
    check = await services.crafting.check_ingredients(user.id, recipe_id)
    return IngredientCheckResponse(has_ingredients=check.has_ingredients, missing_items=check.missing_items)


@router.post("/user/crafting/start", response_model=StartCraftingResponse, status_code=status.HTTP_201_CREATED)
async def start_crafting(data: StartCraftingRequest, user: CurrentUser, services: ServicesDep):
    queue_item = await services.crafting.start(user.id, data.recipe_id)
    return StartCraftingResponse(
        message="Crafting started",
        queue_item=QueueItemResponse.model_validate(queue_item),
        completes_at=queue_item.completes_at,
    )


@router.get("/user/crafting/queue", response_model=list[QueueItemResponse])
async def crafting_queue(user: CurrentUser, services: ServicesDep):
    return [
        QueueItemResponse.model_validate(item).model_copy(update={"recipe_name": recipe.name})
        for item, recipe in await services.crafting.queue(user.id)
    ]


@router.post("/user/crafting/claim/{queue_id}", response_model=ClaimResponse)
async def claim_crafted_item(queue_id: int, user: CurrentUser, services: ServicesDep):
    item = await services.crafting.claim(user.id, queue_id)
    return ClaimResponse(message="Crafted item claimed", item=ItemResponse.model_validate(item))
