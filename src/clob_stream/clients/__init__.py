"""WebSocket clients for the CLOB market and user feeds."""

from .market_ws import DEFAULT_MARKET_WS_URL, MarketWsClient
from .user_ws import DEFAULT_USER_WS_URL, UserWsClient

__all__ = [
    "MarketWsClient",
    "UserWsClient",
    "DEFAULT_MARKET_WS_URL",
    "DEFAULT_USER_WS_URL",
]
