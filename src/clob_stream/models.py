"""Event and subscription models for the CLOB WebSocket feeds."""

from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class Side(str, Enum):
    """Order book side."""
    BUY = "BUY"
    SELL = "SELL"


class _SideMixin(BaseModel):
    @field_validator('side', mode='before', check_fields=False)
    @classmethod
    def normalize_side(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v


class PriceLevel(BaseModel):
    """One aggregated price level of a book snapshot."""
    price: Decimal
    size: Decimal


class BookEvent(BaseModel):
    """Full order book snapshot for one asset."""
    event_type: Literal["book"] = "book"
    market: str
    asset_id: str
    bids: List[PriceLevel] = Field(default_factory=list)
    asks: List[PriceLevel] = Field(default_factory=list)
    timestamp: Optional[str] = None
    hash: Optional[str] = None

    @property
    def best_bid(self) -> Optional[PriceLevel]:
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> Optional[PriceLevel]:
        return self.asks[0] if self.asks else None


class PriceChange(_SideMixin):
    """
    Single price level delta.

    A size of exactly zero removes the level; any other size replaces it.
    """
    asset_id: Optional[str] = None
    price: Decimal
    size: Decimal
    side: Side
    hash: Optional[str] = None
    best_bid: Optional[Decimal] = None
    best_ask: Optional[Decimal] = None

    @property
    def is_removal(self) -> bool:
        return self.size == 0

    @property
    def is_update(self) -> bool:
        return not self.is_removal


class PriceChangeEvent(BaseModel):
    """Incremental order book update for one market."""
    event_type: Literal["price_change"] = "price_change"
    market: str
    price_changes: List[PriceChange] = Field(default_factory=list)
    timestamp: Optional[str] = None


WsEvent = Annotated[Union[BookEvent, PriceChangeEvent], Field(discriminator="event_type")]

WS_EVENT_ADAPTER: TypeAdapter = TypeAdapter(WsEvent)


class MarketSubscription(BaseModel):
    """Subscription frame for the market channel."""
    assets_ids: List[str]


# User channel

class ApiCreds(BaseModel):
    """API credentials forwarded verbatim in the user channel auth block."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    api_key: str = Field(alias="apiKey")
    secret: str
    passphrase: str

    def __repr__(self) -> str:
        return f"ApiCreds(api_key={self.api_key[:4]}...)"


class UserSubscription(BaseModel):
    """Subscription frame for the authenticated user channel."""
    auth: ApiCreds
    markets: List[str] = Field(default_factory=list)
    type: Literal["user"] = "user"


class MakerOrder(BaseModel):
    order_id: str
    matched_amount: Decimal
    price: Decimal
    asset_id: Optional[str] = None
    outcome: Optional[str] = None
    owner: Optional[str] = None


class TradeEvent(_SideMixin):
    """A fill involving one of the user's orders."""
    model_config = ConfigDict(populate_by_name=True)

    event_type: Literal["trade"] = "trade"
    id: str
    asset_id: str
    market: str
    price: Decimal
    size: Decimal
    side: Side
    status: Optional[str] = None
    outcome: Optional[str] = None
    taker_order_id: Optional[str] = None
    maker_orders: List[MakerOrder] = Field(default_factory=list)
    owner: Optional[str] = None
    timestamp: Optional[str] = None


class OrderEvent(_SideMixin):
    """Placement, update or cancellation of one of the user's orders."""
    model_config = ConfigDict(populate_by_name=True)

    event_type: Literal["order"] = "order"
    id: str
    asset_id: str
    market: str
    price: Decimal
    side: Side
    original_size: Optional[Decimal] = None
    size_matched: Optional[Decimal] = None
    order_type: Optional[str] = Field(default=None, alias="type")
    outcome: Optional[str] = None
    owner: Optional[str] = None
    timestamp: Optional[str] = None


UserWsEvent = Annotated[Union[TradeEvent, OrderEvent], Field(discriminator="event_type")]

USER_WS_EVENT_ADAPTER: TypeAdapter = TypeAdapter(UserWsEvent)
