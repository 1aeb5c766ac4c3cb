"""Self-healing stream that reconnects a subscription with exponential backoff."""

import asyncio
import logging
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Generic, Optional, TypeVar, Union

from .errors import ClobStreamError
from .utils.retry import ExponentialBackoff, ReconnectConfig

logger = logging.getLogger(__name__)

T = TypeVar('T')

SessionFactory = Callable[[], Awaitable[AsyncIterator[Any]]]

_SESSION_ENDED = object()


class StreamState(Enum):
    """Driver states."""
    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    BACKOFF = "backoff"
    EXHAUSTED = "exhausted"


class ReconnectingStream(Generic[T]):
    """
    Async iterator that keeps a subscription alive across disconnects.

    ``factory`` is called with no arguments and must return an awaitable that
    resolves to a session stream, or raise ``ClobStreamError`` when the
    connection attempt fails. Items from the session are forwarded unchanged,
    so per-message ``DecodeError`` values reach the consumer as items too.

    When a connect attempt fails or a session ends, the error that caused it
    (if any) is yielded once, the delay grows, and the next poll sleeps before
    calling ``factory`` again. A successful connect resets the backoff. Once
    ``max_attempts`` consecutive failures have been reported the stream stops.

    Connecting and sleeping happen inside ``__anext__``, so a consumer that
    stops iterating (or is cancelled) stops all reconnects. A session read
    runs as a shielded task: cancelling a poll, e.g. with ``asyncio.wait_for``
    as a read timeout, keeps the session and the next poll picks up the same
    read. Use ``aclose()`` or ``async with`` to cancel that read and release
    the current socket.

    Example:
        stream = ReconnectingStream(config, lambda: client.subscribe(asset_ids))
        async with stream:
            async for item in stream:
                if isinstance(item, ClobStreamError):
                    logger.warning(f"Stream error: {item}")
                    continue
                handle(item)
    """

    def __init__(
        self,
        config: ReconnectConfig,
        factory: SessionFactory,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.config = config
        self._factory = factory
        self._sleep = sleep
        self._backoff = ExponentialBackoff(config)
        self._state = StreamState.IDLE
        self._session: Optional[AsyncIterator[Any]] = None
        self._pending_read: Optional[asyncio.Future] = None
        self._closed = False

        self.stats = {
            'connection_count': 0,
            'reconnect_count': 0,
            'events_received': 0,
            'errors': 0,
        }

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def backoff(self) -> ExponentialBackoff:
        return self._backoff

    def __aiter__(self) -> "ReconnectingStream[T]":
        return self

    async def __anext__(self) -> Union[T, ClobStreamError]:
        while True:
            if self._closed or self._state is StreamState.EXHAUSTED:
                raise StopAsyncIteration

            if self._state is StreamState.BACKOFF:
                delay = self._backoff.sleep_seconds()
                logger.info(
                    f"Reconnecting in {delay:.2f}s "
                    f"(attempt {self._backoff.attempts}"
                    f"{'/' + str(self.config.max_attempts) if self.config.max_attempts else ''})"
                )
                await self._sleep(delay)
                self.stats['reconnect_count'] += 1
                self._state = StreamState.IDLE

            # CONNECTING here means a previous connect was cancelled; retry it
            if self._state in (StreamState.IDLE, StreamState.CONNECTING):
                self._state = StreamState.CONNECTING
                try:
                    self._session = await self._factory()
                except ClobStreamError as e:
                    logger.warning(f"Connection attempt failed: {e}")
                    return self._session_failed(e)

                self._backoff.reset()
                self._state = StreamState.STREAMING
                self.stats['connection_count'] += 1
                logger.info("Stream connected")

            read = self._pending_read
            if read is None:
                read = self._pending_read = asyncio.ensure_future(self._read_next(self._session))
            try:
                # A cancelled poll leaves the read running; the next poll resumes it
                item = await asyncio.shield(read)
            except ClobStreamError as e:
                logger.warning(f"Stream interrupted: {e}")
                await self._release_session()
                return self._session_failed(e)
            finally:
                if read.done():
                    self._pending_read = None

            if item is _SESSION_ENDED:
                logger.warning("Stream ended")
                await self._release_session()
                self._session_failed(None)
                continue

            if isinstance(item, ClobStreamError):
                self.stats['errors'] += 1
            else:
                self.stats['events_received'] += 1
            return item

    @staticmethod
    async def _read_next(session: AsyncIterator[Any]) -> Any:
        try:
            return await session.__anext__()
        except StopAsyncIteration:
            return _SESSION_ENDED

    def _session_failed(self, error: Optional[ClobStreamError]) -> Optional[ClobStreamError]:
        self._session = None
        self._backoff.record_failure()
        if error is not None:
            self.stats['errors'] += 1

        if self._backoff.exhausted:
            logger.error(f"Max reconnection attempts reached ({self._backoff.attempts}), stopping stream")
            self._state = StreamState.EXHAUSTED
        else:
            self._state = StreamState.BACKOFF
        return error

    async def _release_session(self) -> None:
        session, self._session = self._session, None
        aclose = getattr(session, 'aclose', None)
        if aclose is not None:
            await aclose()

    async def aclose(self) -> None:
        """Stop the stream and close the current session, if any."""
        self._closed = True
        read, self._pending_read = self._pending_read, None
        if read is not None and not read.done():
            read.cancel()
            try:
                await read
            except asyncio.CancelledError:
                pass
        await self._release_session()

    async def __aenter__(self) -> "ReconnectingStream[T]":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def get_stats(self) -> Dict[str, Any]:
        """Get connection and reconnect statistics."""
        return {
            **self.stats,
            'state': self._state.value,
            'current_delay_seconds': self._backoff.delay,
            'attempts': self._backoff.attempts,
        }
