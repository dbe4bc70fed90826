from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict

from chain.codec import format_amount
from chain.entities import PurchaseEventEntity, SaleSnapshotEntity, UserPurchaseEntity


def to_datetime(seconds: int) -> datetime | None:
    """Render unix seconds as UTC, or None when the value has no calendar date."""
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


class SaleInfoResponse(BaseModel):
    """
    Response schema for sale information.

    Amounts are decimal strings; ``progress`` is a display-only percentage.

    Attributes
    ----------
    token_price : str
        Price per token in wei
    min_purchase : str
        Minimum purchase amount
    max_purchase : str
        Maximum purchase amount
    max_supply : str
        Tokens available for sale
    total_sold : str
        Tokens sold so far
    remaining_supply : str
        Tokens still available
    total_raised : str
        Native currency raised, in wei
    start_time : datetime | None
        Sale start, null when out of calendar range
    end_time : datetime | None
        Sale end, null when out of calendar range (e.g. an open-ended sale)
    whitelist_required : bool
        Whether buyers must be whitelisted
    is_active : bool
        Whether the sale is active
    progress : float
        Percentage of supply sold
    """
    token_price: str
    min_purchase: str
    max_purchase: str
    max_supply: str
    total_sold: str
    remaining_supply: str
    total_raised: str
    start_time: datetime | None
    end_time: datetime | None
    whitelist_required: bool
    is_active: bool
    progress: float

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, snapshot: SaleSnapshotEntity) -> "SaleInfoResponse":
        remaining = max(snapshot.max_supply - snapshot.total_sold, 0)
        progress = 0.0
        if snapshot.max_supply:
            progress = round(snapshot.total_sold * 10000 // snapshot.max_supply / 100, 2)
        return cls(
            token_price=format_amount(snapshot.token_price),
            min_purchase=format_amount(snapshot.min_purchase),
            max_purchase=format_amount(snapshot.max_purchase),
            max_supply=format_amount(snapshot.max_supply),
            total_sold=format_amount(snapshot.total_sold),
            remaining_supply=format_amount(remaining),
            total_raised=format_amount(snapshot.total_raised),
            start_time=to_datetime(snapshot.start_time),
            end_time=to_datetime(snapshot.end_time),
            whitelist_required=snapshot.whitelist_required,
            is_active=snapshot.is_active,
            progress=progress
        )


class UserPurchaseResponse(BaseModel):
    """
    Response schema for a buyer's purchases.

    Attributes
    ----------
    address : str
        Buyer address
    amount : str
        Tokens in the last purchase
    paid_amount : str
        Native currency spent, in wei
    timestamp : datetime | None
        Time of the purchase, null when out of calendar range
    claimed : bool
        Whether tokens were claimed
    total_purchased : str
        Cumulative tokens bought
    """
    address: str
    amount: str
    paid_amount: str
    timestamp: datetime | None
    claimed: bool
    total_purchased: str

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, purchase: UserPurchaseEntity) -> "UserPurchaseResponse":
        return cls(
            address=purchase.address,
            amount=format_amount(purchase.amount),
            paid_amount=format_amount(purchase.paid_amount),
            timestamp=to_datetime(purchase.timestamp),
            claimed=purchase.claimed,
            total_purchased=format_amount(purchase.total_purchased)
        )


class PurchaseEventResponse(BaseModel):
    buyer: str
    token_amount: str
    paid_amount: str
    timestamp: int
    transaction_hash: str
    block_number: int

    @classmethod
    def from_entity(cls, event: PurchaseEventEntity) -> "PurchaseEventResponse":
        return cls(
            buyer=event.buyer,
            token_amount=format_amount(event.token_amount),
            paid_amount=format_amount(event.paid_amount),
            timestamp=event.timestamp,
            transaction_hash=event.transaction_hash,
            block_number=event.block_number
        )
