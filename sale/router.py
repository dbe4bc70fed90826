from typing import Annotated

from dishka import FromComponent
from dishka.integrations.fastapi import inject
from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from core.schemas import SuccessResponse
from sale.schemas import SaleInfoResponse, UserPurchaseResponse
from sale.usecases import GetSaleInfoUseCase, GetUserPurchasesUseCase, StreamPurchaseEventsUseCase

router = APIRouter(
    prefix="/v1/sale",
    tags=["Sale"]
)


@router.get("/info", response_model=SuccessResponse[SaleInfoResponse])
@inject
async def get_sale_info(
    use_case: Annotated[GetSaleInfoUseCase, FromComponent("sale")]
) -> SuccessResponse[SaleInfoResponse]:
    """
    Get current sale configuration and progress.

    Parameters
    ----------
    use_case : GetSaleInfoUseCase
        Sale info use case

    Returns
    -------
    SuccessResponse[SaleInfoResponse]
        Sale snapshot
    """
    return SuccessResponse(data=await use_case())


@router.get("/purchases/{address}", response_model=SuccessResponse[UserPurchaseResponse])
@inject
async def get_user_purchases(
    address: str,
    use_case: Annotated[GetUserPurchasesUseCase, FromComponent("sale")]
) -> SuccessResponse[UserPurchaseResponse]:
    """
    Get purchase information for a buyer.

    Parameters
    ----------
    address : str
        Buyer address
    use_case : GetUserPurchasesUseCase
        User purchases use case

    Returns
    -------
    SuccessResponse[UserPurchaseResponse]
        Purchase record
    """
    return SuccessResponse(data=await use_case(address=address))


@router.get("/stats")
async def get_sale_stats():
    return {"message": "sale stats endpoint"}


@router.get("/events")
@inject
async def stream_purchase_events(
    use_case: Annotated[StreamPurchaseEventsUseCase, FromComponent("sale")]
) -> StreamingResponse:
    """
    Stream purchase events as server-sent events until the client disconnects.

    Parameters
    ----------
    use_case : StreamPurchaseEventsUseCase
        Purchase event stream use case

    Returns
    -------
    StreamingResponse
        ``text/event-stream`` response
    """
    return StreamingResponse(
        await use_case(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"}
    )
