from fastapi import APIRouter, status

from akashic.api.deps import CurrentUser, ServicesDep
from akashic.schemas import (
    CrystalPurchaseRequest,
    CrystalPurchaseResponse,
    CrystalResponse,
    EquipRequest,
    ItemCreateRequest,
    ItemResponse,
    ItemUpdateRequest,
    MessageResponse,
    QuantityRequest,
)

router = APIRouter(tags=["inventory"])


@router.get("/user/inventory", response_model=list[ItemResponse])
async def list_inventory(user: CurrentUser, services: ServicesDep):
    return await services.inventory.list_items(user.id)


@router.get("/user/inventory/equipped", response_model=list[ItemResponse])
async def list_equipped(user: CurrentUser, services: ServicesDep):
    return await services.inventory.list_equipped(user.id)


@router.get("/user/inventory/{item_id}", response_model=ItemResponse)
async def get_item(item_id: int, user: CurrentUser, services: ServicesDep):
    return await services.inventory.get_item(user.id, item_id)


@router.post("/user/inventory", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def add_item(data: ItemCreateRequest, user: CurrentUser, services: ServicesDep):
    # The owner is always the signed-in user, never a field of the body.
    return await services.inventory.add_item(user.id, data.model_dump())


@router.patch("/user/inventory/{item_id}", response_model=ItemResponse)
async def update_item(item_id: int, data: ItemUpdateRequest, user: CurrentUser, services: ServicesDep):
    return await services.inventory.update_item(user.id, item_id, data.model_dump(exclude_unset=True))


@router.delete("/user/inventory/{item_id}", response_model=MessageResponse)
async def remove_item(item_id: int, user: CurrentUser, services: ServicesDep):
    await services.inventory.remove_item(user.id, item_id)
    return MessageResponse(message="Item removed from inventory")


@router.patch("/user/inventory/{item_id}/quantity", response_model=ItemResponse)
async def set_quantity(item_id: int, data: QuantityRequest, user: CurrentUser, services: ServicesDep):
    return await services.inventory.set_quantity(user.id, item_id, data.quantity)


@router.patch("/user/inventory/{item_id}/equip", response_model=ItemResponse)
async def set_equipped(item_id: int, data: EquipRequest, user: CurrentUser, services: ServicesDep):
    return await services.inventory.set_equipped(user.id, item_id, data.is_equipped)


@router.get("/crystals", response_model=list[CrystalResponse])
async def list_crystals(services: ServicesDep):
    return services.inventory.list_crystals()


@router.post("/crystals/purchase", response_model=CrystalPurchaseResponse)
async def purchase_crystal(data: CrystalPurchaseRequest, user: CurrentUser, services: ServicesDep):
    result = await services.inventory.purchase_crystal(user.id, data.crystal_name)
    return CrystalPurchaseResponse(
        message=f"Purchased {result.item.name} for {result.price} Mana",
        new_balance=result.new_balance,
        item=ItemResponse.model_validate(result.item),
    )
