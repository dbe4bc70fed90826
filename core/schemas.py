from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class SuccessResponse(BaseModel, Generic[T]):
    """
    Envelope for successful API responses.

    Attributes
    ----------
    success : bool
        Always True
    message : str | None
        Optional human-readable message
    data : T
        Payload
    """
    success: bool = True
    message: str | None = None
    data: T

    model_config = ConfigDict(from_attributes=True)
