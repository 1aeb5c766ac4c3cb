"""Tests for event and subscription models."""

import json
from decimal import Decimal

import pytest

from clob_stream.models import (
    WS_EVENT_ADAPTER,
    ApiCreds,
    MarketSubscription,
    PriceChange,
    Side,
    UserSubscription,
)


@pytest.mark.unit
def test_price_change_zero_size_is_removal(price_change_payload):
    event = WS_EVENT_ADAPTER.validate_python(price_change_payload)
    removed, updated = event.price_changes

    assert removed.is_removal
    assert not removed.is_update
    assert removed.side is Side.BUY
    assert removed.best_bid == Decimal("0.48")

    assert updated.is_update
    assert not updated.is_removal
    assert updated.side is Side.SELL


@pytest.mark.unit
@pytest.mark.parametrize("size", ["0", "0.0", "0.000"])
def test_any_zero_representation_removes(size):
    change = PriceChange(price="0.5", size=size, side="SELL")
    assert change.is_removal


@pytest.mark.unit
def test_prices_keep_decimal_precision(book_payload):
    book_payload['bids'] = [{'price': '0.123456789012345678', 'size': '1e3'}]
    event = WS_EVENT_ADAPTER.validate_python(book_payload)

    assert event.best_bid.price == Decimal('0.123456789012345678')
    assert event.best_bid.size == Decimal('1000')


@pytest.mark.unit
def test_book_without_levels_has_no_best_prices():
    event = WS_EVENT_ADAPTER.validate_python({'event_type': 'book', 'market': 'm', 'asset_id': 'a'})

    assert event.best_bid is None
    assert event.best_ask is None


@pytest.mark.unit
def test_market_subscription_wire_shape():
    payload = json.loads(MarketSubscription(assets_ids=["1", "2"]).model_dump_json(by_alias=True))
    assert payload == {"assets_ids": ["1", "2"]}


@pytest.mark.unit
def test_user_subscription_wire_shape():
    creds = ApiCreds(api_key="key", secret="secret", passphrase="pass")
    payload = json.loads(UserSubscription(auth=creds, markets=["m-1"]).model_dump_json(by_alias=True))

    assert payload == {
        "auth": {"apiKey": "key", "secret": "secret", "passphrase": "pass"},
        "markets": ["m-1"],
        "type": "user",
    }


@pytest.mark.unit
def test_creds_repr_hides_secrets():
    creds = ApiCreds(apiKey="abcd1234", secret="s3cret", passphrase="p4ss")

    assert "s3cret" not in repr(creds)
    assert "p4ss" not in repr(creds)
