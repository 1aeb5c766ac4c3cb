"""Tests for the reconnect policy and backoff state."""

import pytest
from pydantic import ValidationError

from clob_stream.utils.retry import ExponentialBackoff, ReconnectConfig


@pytest.mark.unit
@pytest.mark.parametrize("initial,maximum,multiplier", [
    (1.0, 30.0, 2.0),
    (0.5, 4.0, 3.0),
    (0.25, 100.0, 1.5),
])
def test_delay_after_k_failures(initial, maximum, multiplier):
    backoff = ExponentialBackoff(ReconnectConfig(
        initial_backoff_seconds=initial,
        max_backoff_seconds=maximum,
        backoff_multiplier=multiplier,
    ))

    for k in range(1, 12):
        backoff.record_failure()
        assert backoff.attempts == k
        assert backoff.delay == pytest.approx(min(maximum, initial * multiplier ** k))
        assert initial <= backoff.delay <= maximum


@pytest.mark.unit
def test_reset_restores_initial_state():
    backoff = ExponentialBackoff(ReconnectConfig(initial_backoff_seconds=1.0, max_backoff_seconds=8.0))
    for _ in range(6):
        backoff.record_failure()

    backoff.reset()

    assert backoff.delay == 1.0
    assert backoff.attempts == 0


@pytest.mark.unit
def test_exhausted_only_with_cap():
    capped = ExponentialBackoff(ReconnectConfig(max_attempts=2))
    unbounded = ExponentialBackoff(ReconnectConfig(max_attempts=None))

    capped.record_failure()
    assert not capped.exhausted
    capped.record_failure()
    assert capped.exhausted

    for _ in range(100):
        unbounded.record_failure()
    assert not unbounded.exhausted


@pytest.mark.unit
def test_jitter_stays_within_quarter_of_delay():
    backoff = ExponentialBackoff(ReconnectConfig(initial_backoff_seconds=4.0, max_backoff_seconds=4.0, jitter=True))

    for _ in range(50):
        assert 3.0 <= backoff.sleep_seconds() <= 5.0
    assert backoff.delay == 4.0


@pytest.mark.unit
def test_sleep_without_jitter_is_exact():
    backoff = ExponentialBackoff(ReconnectConfig(initial_backoff_seconds=1.0))
    backoff.record_failure()
    assert backoff.sleep_seconds() == 2.0


@pytest.mark.unit
@pytest.mark.parametrize("kwargs", [
    {"backoff_multiplier": 1.0},
    {"initial_backoff_seconds": -1.0},
    {"initial_backoff_seconds": 10.0, "max_backoff_seconds": 5.0},
    {"max_attempts": 0},
])
def test_invalid_policies_rejected(kwargs):
    with pytest.raises(ValidationError):
        ReconnectConfig(**kwargs)


@pytest.mark.unit
def test_policy_is_immutable():
    config = ReconnectConfig()
    with pytest.raises(ValidationError):
        config.max_attempts = 3
