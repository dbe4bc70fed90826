from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict


class SaleSnapshotEntity(BaseModel):
    """
    Point-in-time read of the sale configuration and counters.

    Attributes
    ----------
    token_price : int
        Price per token in wei
    min_purchase : int
        Minimum purchase amount
    max_purchase : int
        Maximum purchase amount
    max_supply : int
        Tokens available for sale
    start_time : int
        Sale start, unix seconds
    end_time : int
        Sale end, unix seconds
    whitelist_required : bool
        Whether buyers must be whitelisted
    total_sold : int
        Tokens sold so far
    total_raised : int
        Native currency raised so far, in wei
    is_active : bool
        Whether the sale currently accepts purchases
    """
    token_price: int
    min_purchase: int
    max_purchase: int
    max_supply: int
    start_time: int
    end_time: int
    whitelist_required: bool
    total_sold: int
    total_raised: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True, frozen=True)


class UserPurchaseEntity(BaseModel):
    """
    Purchase record of one buyer.

    Attributes
    ----------
    address : str
        Buyer address
    amount : int
        Tokens bought in the last recorded purchase
    paid_amount : int
        Native currency spent, in wei
    timestamp : int
        Time of the purchase, unix seconds
    claimed : bool
        Whether tokens were claimed
    total_purchased : int
        Cumulative tokens bought
    """
    address: str
    amount: int
    paid_amount: int
    timestamp: int
    claimed: bool
    total_purchased: int

    model_config = ConfigDict(from_attributes=True, frozen=True)


class PurchaseEventEntity(BaseModel):
    """
    Decoded ``TokenPurchase`` log.

    Attributes
    ----------
    buyer : str
        Buyer address
    token_amount : int
        Tokens bought
    paid_amount : int
        Native currency paid, in wei
    timestamp : int
        Unix timestamp emitted by the contract
    transaction_hash : str
        Hash of the originating transaction
    block_number : int
        Block containing the log
    """
    buyer: str
    token_amount: int
    paid_amount: int
    timestamp: int
    transaction_hash: str
    block_number: int

    model_config = ConfigDict(from_attributes=True, frozen=True)


@dataclass(frozen=True)
class GasPolicy:
    """Gas limit and optional fixed gas price; node suggestion when unset."""
    gas_limit: int = 300000
    gas_price: int | None = None


@dataclass(frozen=True)
class TransactionHandle:
    transaction_hash: str
    contract_address: str
    method: str
    args: tuple = ()


@dataclass(frozen=True)
class Receipt:
    transaction_hash: str
    success: bool
    block_number: int
    gas_used: int = 0


@dataclass
class PendingTransaction:
    """
    A submitted state-changing call.

    Resolved once its receipt is known; terminal after that.
    """
    handle: TransactionHandle
    receipt: Receipt | None = field(default=None)

    @property
    def transaction_hash(self) -> str:
        return self.handle.transaction_hash

    @property
    def resolved(self) -> bool:
        return self.receipt is not None

    @property
    def success(self) -> bool | None:
        return None if self.receipt is None else self.receipt.success

    @property
    def block_number(self) -> int | None:
        return None if self.receipt is None else self.receipt.block_number
