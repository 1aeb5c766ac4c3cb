"""
CLOB Stream - resilient order-book streaming client.

Connects to the CLOB market (and user) WebSocket feeds, decodes book snapshots
and price changes, and keeps the subscription alive across disconnects with
exponential backoff.
"""

from .clients.market_ws import MarketWsClient
from .clients.user_ws import UserWsClient
from .errors import (
    ClobStreamError,
    ConnectionClosedError,
    DecodeError,
    TransportError,
    UnsupportedFrameError,
)
from .models import (
    ApiCreds,
    BookEvent,
    MarketSubscription,
    OrderEvent,
    PriceChange,
    PriceChangeEvent,
    PriceLevel,
    Side,
    TradeEvent,
    UserWsEvent,
    WsEvent,
)
from .stream import ReconnectingStream, StreamState
from .utils.retry import ExponentialBackoff, ReconnectConfig

__version__ = "1.0.0"
__author__ = "CLOB Stream Team"

__all__ = [
    "MarketWsClient",
    "UserWsClient",
    "ReconnectingStream",
    "StreamState",
    "ReconnectConfig",
    "ExponentialBackoff",
    "ClobStreamError",
    "TransportError",
    "ConnectionClosedError",
    "DecodeError",
    "UnsupportedFrameError",
    "ApiCreds",
    "BookEvent",
    "MarketSubscription",
    "OrderEvent",
    "PriceChange",
    "PriceChangeEvent",
    "PriceLevel",
    "Side",
    "TradeEvent",
    "UserWsEvent",
    "WsEvent",
]
