from typing import Annotated

from dishka import FromComponent
from dishka.integrations.fastapi import inject
from fastapi import APIRouter, Depends

from admin.schemas import TransactionData, WhitelistBatchRequest, WhitelistUpdateRequest
from admin.usecases import SetSalePausedUseCase, UpdateWhitelistUseCase
from auth.dependencies import require_admin
from core.schemas import SuccessResponse

router = APIRouter(
    prefix="/v1/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)]
)


@router.post("/whitelist", response_model=SuccessResponse[TransactionData])
@inject
async def add_to_whitelist(
    request: WhitelistUpdateRequest,
    use_case: Annotated[UpdateWhitelistUseCase, FromComponent("admin")]
) -> SuccessResponse[TransactionData]:
    """
    Add one address to the whitelist and wait for confirmation.

    Parameters
    ----------
    request : WhitelistUpdateRequest
        Address to add
    use_case : UpdateWhitelistUseCase
        Whitelist update use case

    Returns
    -------
    SuccessResponse[TransactionData]
        Confirmed transaction
    """
    data = await use_case(addresses=[request.address], status=True)
    return SuccessResponse(message="Address added to whitelist successfully", data=data)


@router.delete("/whitelist", response_model=SuccessResponse[TransactionData])
@inject
async def remove_from_whitelist(
    request: WhitelistUpdateRequest,
    use_case: Annotated[UpdateWhitelistUseCase, FromComponent("admin")]
) -> SuccessResponse[TransactionData]:
    """Remove one address from the whitelist and wait for confirmation."""
    data = await use_case(addresses=[request.address], status=False)
    return SuccessResponse(message="Address removed from whitelist successfully", data=data)


@router.post("/whitelist/batch", response_model=SuccessResponse[TransactionData])
@inject
async def batch_update_whitelist(
    request: WhitelistBatchRequest,
    use_case: Annotated[UpdateWhitelistUseCase, FromComponent("admin")]
) -> SuccessResponse[TransactionData]:
    """
    Add or remove several addresses in one transaction.

    Parameters
    ----------
    request : WhitelistBatchRequest
        Addresses and target status
    use_case : UpdateWhitelistUseCase
        Whitelist update use case

    Returns
    -------
    SuccessResponse[TransactionData]
        Confirmed transaction
    """
    data = await use_case(addresses=request.addresses, status=request.status)
    return SuccessResponse(message="Whitelist updated successfully", data=data)


@router.get("/users")
async def get_all_users():
    return {"message": "get all users endpoint"}


@router.put("/sale/config")
async def update_sale_config():
    return {"message": "update sale config endpoint"}


@router.post("/sale/pause", response_model=SuccessResponse[TransactionData])
@inject
async def pause_sale(
    use_case: Annotated[SetSalePausedUseCase, FromComponent("admin")]
) -> SuccessResponse[TransactionData]:
    """Pause the sale contract."""
    return SuccessResponse(message="Sale paused", data=await use_case(paused=True))


@router.post("/sale/unpause", response_model=SuccessResponse[TransactionData])
@inject
async def unpause_sale(
    use_case: Annotated[SetSalePausedUseCase, FromComponent("admin")]
) -> SuccessResponse[TransactionData]:
    """Resume the sale contract."""
    return SuccessResponse(message="Sale unpaused", data=await use_case(paused=False))
