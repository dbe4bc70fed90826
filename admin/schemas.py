from pydantic import BaseModel, ConfigDict, Field, field_validator

from chain.codec import format_address, parse_address
from chain.entities import PendingTransaction
from core.exceptions import InvalidFormatException


def _normalize(address: str) -> str:
    try:
        return format_address(parse_address(address))
    except InvalidFormatException:
        raise ValueError("Invalid Ethereum address format")


class WhitelistUpdateRequest(BaseModel):
    """
    Request schema for adding or removing one address.

    Attributes
    ----------
    address : str
        Address to update
    """
    address: str = Field(..., description="Address to add or remove")

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _normalize(v)


class WhitelistBatchRequest(BaseModel):
    """
    Request schema for a batch whitelist update.

    Order is preserved and duplicates are kept.

    Attributes
    ----------
    addresses : list[str]
        Addresses to update
    status : bool
        True to whitelist, False to remove
    """
    addresses: list[str] = Field(..., min_length=1, description="Addresses to update")
    status: bool = Field(default=True, description="True to whitelist, False to remove")

    @field_validator("addresses")
    @classmethod
    def validate_addresses(cls, v: list[str]) -> list[str]:
        return [_normalize(address) for address in v]


class TransactionData(BaseModel):
    """
    Confirmed transaction summary.

    Attributes
    ----------
    transaction_hash : str
        Transaction hash
    block_number : int | None
        Confirming block
    contract_address : str
        Target contract
    method : str
        Contract method called
    addresses : list[str]
        Affected addresses, empty for sale controls
    """
    transaction_hash: str
    block_number: int | None
    contract_address: str
    method: str
    addresses: list[str] = []

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_pending(cls, pending: PendingTransaction, addresses: list[str] | None = None) -> "TransactionData":
        return cls(
            transaction_hash=pending.transaction_hash,
            block_number=pending.block_number,
            contract_address=pending.handle.contract_address,
            method=pending.handle.method,
            addresses=addresses or []
        )
