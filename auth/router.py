from typing import Annotated

from dishka import FromComponent
from dishka.integrations.fastapi import inject
from fastapi import APIRouter

from auth.schemas import LoginData, LoginRequest
from auth.usecases import LoginUseCase
from core.schemas import SuccessResponse

router = APIRouter(
    prefix="/v1/auth",
    tags=["Auth"]
)


@router.post("/login", response_model=SuccessResponse[LoginData])
@inject
async def login(
    request: LoginRequest,
    use_case: Annotated[LoginUseCase, FromComponent("auth")]
) -> SuccessResponse[LoginData]:
    """
    Issue a demo admin token.

    Parameters
    ----------
    request : LoginRequest
        Address, message and signature
    use_case : LoginUseCase
        Login use case

    Returns
    -------
    SuccessResponse[LoginData]
        Token, address and role
    """
    return SuccessResponse(data=await use_case(address=request.address))


@router.post("/verify")
async def verify_signature():
    return {"message": "verify signature endpoint"}
