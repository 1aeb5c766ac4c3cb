"""Pytest configuration and shared fixtures."""

import json
from typing import Any, Dict, List, Optional

import pytest

from clob_stream.errors import ClobStreamError
from clob_stream.utils.retry import ReconnectConfig


class FakeSession:
    """Scripted session stream: yields ``items`` then raises ``end_with``."""

    def __init__(self, items: List[Any], end_with: Optional[BaseException] = None):
        self.items = list(items)
        self.end_with = end_with
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.closed:
            raise StopAsyncIteration
        if self.items:
            return self.items.pop(0)
        self.closed = True
        if self.end_with is not None:
            raise self.end_with
        raise StopAsyncIteration

    async def aclose(self):
        self.closed = True


class FakeFactory:
    """
    Connection factory driven by a list of outcomes.

    Each outcome is either a ``ClobStreamError`` (the connect attempt fails) or
    a ``FakeSession`` (the connect attempt succeeds).
    """

    def __init__(self, outcomes: List[Any]):
        self.outcomes = list(outcomes)
        self.calls = 0
        self.sessions: List[FakeSession] = []

    async def __call__(self):
        self.calls += 1
        if not self.outcomes:
            raise AssertionError("factory called more times than scripted")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, ClobStreamError):
            raise outcome
        self.sessions.append(outcome)
        return outcome


class RecordingSleep:
    """Replacement for ``asyncio.sleep`` that records delays and returns at once."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float):
        self.delays.append(delay)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def reconnect_config() -> ReconnectConfig:
    """Backoff policy with round numbers: 1s doubling up to 8s, unlimited."""
    return ReconnectConfig(
        initial_backoff_seconds=1.0,
        max_backoff_seconds=8.0,
        backoff_multiplier=2.0,
    )


@pytest.fixture
def book_payload() -> Dict[str, Any]:
    """Sample market channel book snapshot."""
    return {
        'event_type': 'book',
        'market': '0xbd31dc8a20211944f6b70f31557f1001557b59905b7738480ca09bd4532f84af',
        'asset_id': '65818619657568813474341868652308942079804919287380422192892211131408793125422',
        'bids': [
            {'price': '0.48', 'size': '30'},
            {'price': '0.47', 'size': '120.5'},
        ],
        'asks': [
            {'price': '0.52', 'size': '25'},
        ],
        'timestamp': '1757908892351',
        'hash': '0x0a1b2c',
    }


@pytest.fixture
def price_change_payload() -> Dict[str, Any]:
    """Sample market channel price change with one removal and one update."""
    return {
        'event_type': 'price_change',
        'market': '0xbd31dc8a20211944f6b70f31557f1001557b59905b7738480ca09bd4532f84af',
        'price_changes': [
            {
                'asset_id': '65818619657568813474341868652308942079804919287380422192892211131408793125422',
                'price': '0.5',
                'size': '0',
                'side': 'BUY',
                'hash': '0x56621a',
                'best_bid': '0.48',
                'best_ask': '0.52',
            },
            {
                'asset_id': '65818619657568813474341868652308942079804919287380422192892211131408793125422',
                'price': '0.53',
                'size': '200',
                'side': 'SELL',
            },
        ],
        'timestamp': '1757908892352',
    }


@pytest.fixture
def book_message(book_payload) -> str:
    return json.dumps(book_payload)


@pytest.fixture
def price_change_message(price_change_payload) -> str:
    return json.dumps(price_change_payload)


@pytest.fixture
def make_session():
    """Build a ``FakeSession(items, end_with=None)``."""
    return FakeSession


@pytest.fixture
def make_factory():
    """Build a ``FakeFactory(outcomes)``."""
    return FakeFactory
