"""Shared WebSocket session handling for the CLOB feed clients."""

import asyncio
import logging
import time
from typing import Any, AsyncIterator, Dict, Optional

import websockets
from pydantic import BaseModel, TypeAdapter
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..errors import ConnectionClosedError, TransportError, UnsupportedFrameError
from .decoding import decode_frame

logger = logging.getLogger(__name__)


class BaseWsClient:
    """
    Opens one subscribed session per ``_open_session`` call.

    Each session is an async generator bound to its socket: it yields decoded
    events and per-message ``DecodeError`` values, and ends by raising
    ``ConnectionClosedError`` or ``TransportError``. The socket is closed when
    the generator finishes, is closed, or is cancelled.
    """

    def __init__(
        self,
        ws_url: str,
        *,
        ping_interval: Optional[float] = 20.0,
        ping_timeout: Optional[float] = 20.0,
        open_timeout: Optional[float] = 10.0,
        close_timeout: Optional[float] = 10.0,
        max_size: Optional[int] = 2**20,
        max_unsupported_frames: Optional[int] = None,
    ):
        self.ws_url = ws_url
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.open_timeout = open_timeout
        self.close_timeout = close_timeout
        self.max_size = max_size
        self.max_unsupported_frames = max_unsupported_frames

        self.stats = {
            'connection_count': 0,
            'messages_received': 0,
            'decode_errors': 0,
            'last_message_time': None,
        }

    async def _open_session(self, subscription: BaseModel, adapter: TypeAdapter) -> AsyncIterator[Any]:
        """Connect, send the subscription frame, and return the session stream."""
        logger.info(f"Connecting to {self.ws_url}")
        try:
            websocket = await websockets.connect(
                self.ws_url,
                ping_interval=self.ping_interval,
                ping_timeout=self.ping_timeout,
                open_timeout=self.open_timeout,
                close_timeout=self.close_timeout,
                max_size=self.max_size,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            raise TransportError(f"Failed to connect to {self.ws_url}: {e}", cause=e) from e

        try:
            await websocket.send(subscription.model_dump_json(by_alias=True))
        except (OSError, WebSocketException) as e:
            await websocket.close()
            raise TransportError(f"Failed to send subscription: {e}", cause=e) from e
        except BaseException:
            # Cancelled mid-send: release the socket before propagating
            await websocket.close()
            raise

        self.stats['connection_count'] += 1
        logger.info(f"Subscribed on {self.ws_url}")
        return self._read_session(websocket, adapter)

    async def _read_session(self, websocket, adapter: TypeAdapter) -> AsyncIterator[Any]:
        unsupported_in_a_row = 0
        try:
            while True:
                try:
                    message = await websocket.recv()
                except ConnectionClosed as e:
                    code = e.rcvd.code if e.rcvd is not None else None
                    reason = e.rcvd.reason if e.rcvd is not None else ""
                    logger.warning(f"WebSocket connection closed by server (code={code})")
                    raise ConnectionClosedError(code=code, reason=reason, cause=e) from e
                except (OSError, WebSocketException) as e:
                    logger.error(f"WebSocket error: {e}")
                    raise TransportError(f"WebSocket error: {e}", cause=e) from e

                self.stats['messages_received'] += 1
                self.stats['last_message_time'] = time.time()

                item = decode_frame(message, adapter)
                if item is None:
                    continue

                if isinstance(item, UnsupportedFrameError):
                    unsupported_in_a_row += 1
                    if self.max_unsupported_frames is not None and unsupported_in_a_row >= self.max_unsupported_frames:
                        raise TransportError(
                            f"Received {unsupported_in_a_row} unexpected binary frames in a row",
                            cause=item,
                        )
                else:
                    unsupported_in_a_row = 0

                if isinstance(item, Exception):
                    self.stats['decode_errors'] += 1
                yield item
        finally:
            await websocket.close()

    def get_stats(self) -> Dict[str, Any]:
        """Get connection and decoding statistics."""
        last_message_age = None
        if self.stats['last_message_time']:
            last_message_age = time.time() - self.stats['last_message_time']

        return {
            **self.stats,
            'last_message_age_seconds': last_message_age,
        }
