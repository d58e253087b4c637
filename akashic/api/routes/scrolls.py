from fastapi import APIRouter

from akashic.api.deps import CurrentUser, OptionalUser, ServicesDep
from akashic.schemas import ScrollResponse, UnlockRequest, UnlockResponse, UnlockStatusResponse

router = APIRouter(tags=["scrolls"])


@router.get("/scrolls", response_model=list[ScrollResponse])
async def list_scrolls(services: ServicesDep, user: OptionalUser, type: str | None = None):
    """The catalog, optionally filtered by type. Unknown types return everything."""
    scrolls = await services.catalog.list_scrolls(type)
    if user is None:
        return [ScrollResponse.model_validate(scroll) for scroll in scrolls]

    states = await services.catalog.unlock_states(user.id, scrolls)
    return [
        ScrollResponse.model_validate(scroll).model_copy(update={"is_unlocked": states[scroll.id]})
        for scroll in scrolls
    ]


@router.get("/scrolls/{scroll_id}", response_model=ScrollResponse)
async def get_scroll(scroll_id: int, services: ServicesDep, user: OptionalUser):
    scroll = await services.catalog.get_scroll(scroll_id)
    response = ScrollResponse.model_validate(scroll)
    if user is not None:
        response.is_unlocked = await services.catalog.is_unlocked_for_user(user.id, scroll_id)
    return response


@router.post("/scrolls/{scroll_id}/unlock", response_model=UnlockResponse)
async def unlock_scroll(scroll_id: int, data: UnlockRequest, user: CurrentUser, services: ServicesDep):
    scroll = await services.catalog.attempt_unlock(user.id, scroll_id, data.key)
    return UnlockResponse(
        success=True, scroll=ScrollResponse.model_validate(scroll).model_copy(update={"is_unlocked": True})
    )


@router.get("/user/scrolls", response_model=list[ScrollResponse])
async def list_unlocked_scrolls(user: CurrentUser, services: ServicesDep):
    scrolls = await services.catalog.list_unlocked_for_user(user.id)
    return [ScrollResponse.model_validate(scroll).model_copy(update={"is_unlocked": True}) for scroll in scrolls]


@router.get("/user/scrolls/{scroll_id}", response_model=UnlockStatusResponse)
async def scroll_unlock_status(scroll_id: int, user: CurrentUser, services: ServicesDep):
    return UnlockStatusResponse(is_unlocked=await services.catalog.is_unlocked_for_user(user.id, scroll_id))
