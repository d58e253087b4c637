from fastapi import APIRouter, Query

from akashic.api.deps import CurrentUser, ServicesDep
from akashic.schemas import (
    BalanceResponse,
    PackageResponse,
    PurchaseRequest,
    PurchaseResponse,
    SpendPurpose,
    SpendRequest,
    SpendResponse,
    TransactionResponse,
)

router = APIRouter(tags=["mana"])


@router.get("/user/mana", response_model=BalanceResponse)
async def get_balance(user: CurrentUser, services: ServicesDep):
    return BalanceResponse(balance=await services.ledger.get_balance(user.id))


@router.get("/user/mana/transactions", response_model=list[TransactionResponse])
async def list_transactions(user: CurrentUser, services: ServicesDep, limit: int | None = Query(default=None, gt=0)):
    return await services.ledger.list_transactions(user.id, limit)


@router.post("/user/mana/spend", response_model=SpendResponse)
async def spend_mana(data: SpendRequest, user: CurrentUser, services: ServicesDep):
    """
    Spends Mana. With purpose `scroll_unlock` and a scroll id the scroll is unlocked
    in the same transaction, and nothing is charged if it already was.
    """
    user_id = user.id
    if data.purpose is SpendPurpose.SCROLL_UNLOCK and data.scroll_id is not None:
        result = await services.catalog.unlock_with_mana(user_id, data.scroll_id, data.amount)
        return SpendResponse(transaction_id=result.transaction_id, new_balance=result.new_balance)

    transaction = await services.ledger.spend(
        user_id,
        data.amount,
        f"Spent {data.amount} mana to access content",
        reference_id=str(data.scroll_id) if data.scroll_id is not None else None,
    )
    return SpendResponse(transaction_id=transaction.id, new_balance=transaction.balance_after)


@router.get("/mana/packages", response_model=list[PackageResponse])
async def list_packages(services: ServicesDep):
    return await services.ledger.list_packages()


@router.get("/mana/packages/{package_id}", response_model=PackageResponse)
async def get_package(package_id: int, services: ServicesDep):
    return await services.ledger.get_package(package_id)


@router.post("/mana/purchase/direct", response_model=PurchaseResponse)
async def purchase_direct(data: PurchaseRequest, user: CurrentUser, services: ServicesDep):
    result = await services.ledger.purchase_package(user.id, data.package_id)
    return PurchaseResponse(
        message=f"Successfully purchased {result.amount} Mana",
        amount=result.amount,
        new_balance=result.new_balance,
        transaction_id=result.transaction_id,
    )
