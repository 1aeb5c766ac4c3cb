"""WebSocket client for the authenticated CLOB user channel."""

import logging
from typing import AsyncIterator, Iterable, Union

from ..errors import DecodeError
from ..models import USER_WS_EVENT_ADAPTER, ApiCreds, UserSubscription, UserWsEvent
from .base import BaseWsClient

logger = logging.getLogger(__name__)

DEFAULT_USER_WS_URL = "wss://ws-subscriptions-clob.polymarket.com/ws/user"


class UserWsClient(BaseWsClient):
    """Streams trade and order events for the owner of ``ApiCreds``."""

    def __init__(self, ws_url: str = DEFAULT_USER_WS_URL, **kwargs):
        super().__init__(ws_url, **kwargs)

    @classmethod
    def from_config(cls, config) -> "UserWsClient":
        """Build a client from a ``UserConfig`` settings section."""
        return cls(
            config.ws_url,
            ping_interval=config.ping_interval_seconds,
            ping_timeout=config.ping_timeout_seconds,
            open_timeout=config.open_timeout_seconds,
        )

    async def subscribe(
        self,
        creds: ApiCreds,
        markets: Iterable[str] = (),
    ) -> AsyncIterator[Union[UserWsEvent, DecodeError]]:
        """
        Open a session authenticated with ``creds``.

        An empty ``markets`` list subscribes to events for every market.

        Raises:
            TransportError: If the connection or the subscription send fails
        """
        subscription = UserSubscription(auth=creds, markets=list(markets))
        return await self._open_session(subscription, USER_WS_EVENT_ADAPTER)
