"""WebSocket client for the CLOB market channel (order book updates)."""

import logging
from typing import AsyncIterator, Iterable, Union

from ..errors import DecodeError
from ..models import WS_EVENT_ADAPTER, MarketSubscription, WsEvent
from .base import BaseWsClient

logger = logging.getLogger(__name__)

DEFAULT_MARKET_WS_URL = "wss://ws-subscriptions-clob.polymarket.com/ws/market"


class MarketWsClient(BaseWsClient):
    """
    Streams book snapshots and price changes for a set of asset ids.

    The server drops idle connections after a minute or two, so long-lived
    consumers should wrap ``subscribe`` in a ``ReconnectingStream``::

        client = MarketWsClient()
        stream = ReconnectingStream(ReconnectConfig(), lambda: client.subscribe(asset_ids))
        async for item in stream:
            ...
    """

    def __init__(self, ws_url: str = DEFAULT_MARKET_WS_URL, **kwargs):
        super().__init__(ws_url, **kwargs)

    @classmethod
    def from_config(cls, config) -> "MarketWsClient":
        """Build a client from a ``MarketConfig`` settings section."""
        return cls(
            config.ws_url,
            ping_interval=config.ping_interval_seconds,
            ping_timeout=config.ping_timeout_seconds,
            open_timeout=config.open_timeout_seconds,
            max_unsupported_frames=config.max_unsupported_frames,
        )

    async def subscribe(self, asset_ids: Iterable[str]) -> AsyncIterator[Union[WsEvent, DecodeError]]:
        """
        Open a session subscribed to ``asset_ids``.

        Returns once the subscription frame has been sent. The returned stream
        yields ``BookEvent`` / ``PriceChangeEvent`` items and ``DecodeError``
        values for messages that could not be decoded.

        Raises:
            TransportError: If the connection or the subscription send fails
        """
        subscription = MarketSubscription(assets_ids=list(asset_ids))
        logger.info(f"Subscribing to {len(subscription.assets_ids)} asset(s)")
        return await self._open_session(subscription, WS_EVENT_ADAPTER)
