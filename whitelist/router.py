from typing import Annotated

from dishka import FromComponent
from dishka.integrations.fastapi import inject
from fastapi import APIRouter

from core.schemas import SuccessResponse
from whitelist.schemas import WhitelistStatusData, WhitelistVerifyData
from whitelist.usecases import GetWhitelistStatusUseCase

router = APIRouter(
    prefix="/v1/whitelist",
    tags=["Whitelist"]
)


@router.get("/status/{address}", response_model=SuccessResponse[WhitelistStatusData])
@inject
async def get_whitelist_status(
    address: str,
    use_case: Annotated[
        GetWhitelistStatusUseCase, FromComponent("whitelist")
    ]
) -> SuccessResponse[WhitelistStatusData]:
    """
    Check whether an address is on the token whitelist.

    Parameters
    ----------
    address : str
        Address to check
    use_case : GetWhitelistStatusUseCase
        Whitelist status use case

    Returns
    -------
    SuccessResponse[WhitelistStatusData]
        Whitelist status
    """
    return SuccessResponse(data=await use_case(address=address))


@router.get("/verify/{address}", response_model=WhitelistVerifyData)
async def verify_whitelist(address: str) -> WhitelistVerifyData:
    """Merkle-proof verification placeholder; always unverified."""
    return WhitelistVerifyData(address=address, verified=False)
