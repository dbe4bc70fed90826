from pydantic import BaseModel, ConfigDict, Field, field_validator

from chain.codec import format_address, parse_address
from core.exceptions import InvalidFormatException


class LoginRequest(BaseModel):
    """
    Request schema for admin login.

    Attributes
    ----------
    address : str
        Wallet address of the admin
    message : str
        Signed message
    signature : str
        Signature of the message (not verified)
    """
    address: str = Field(..., description="Wallet address of the admin")
    message: str = Field(..., min_length=1, description="Signed message")
    signature: str = Field(..., min_length=1, description="Signature of the message")

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        try:
            return format_address(parse_address(v))
        except InvalidFormatException:
            raise ValueError("Invalid Ethereum address format")


class LoginData(BaseModel):
    token: str
    address: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class AdminPrincipal(BaseModel):
    """Caller identity attached by the admin guard."""
    address: str | None
    role: str
