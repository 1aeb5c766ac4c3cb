"""Reconnect policy and exponential backoff state."""

import logging
import random
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)


class ReconnectConfig(BaseModel):
    """Backoff policy for reconnecting a dropped stream."""
    model_config = ConfigDict(frozen=True)

    initial_backoff_seconds: float = Field(default=1.0, ge=0, description="Delay reset value after a successful connect")
    max_backoff_seconds: float = Field(default=30.0, ge=0, description="Upper bound on the reconnect delay")
    backoff_multiplier: float = Field(default=2.0, gt=1.0, description="Delay growth factor per failed attempt")
    max_attempts: Optional[int] = Field(default=None, ge=1, description="Consecutive failures before giving up; None retries forever")
    jitter: bool = Field(default=False, description="Randomize each sleep by +/-25%")

    @model_validator(mode='after')
    def check_bounds(self):
        if self.max_backoff_seconds < self.initial_backoff_seconds:
            raise ValueError("max_backoff_seconds must be >= initial_backoff_seconds")
        return self


class ExponentialBackoff:
    """
    Mutable backoff state driven by a ``ReconnectConfig``.

    ``delay`` starts at ``initial_backoff_seconds`` and after ``k`` consecutive
    failures equals ``min(max_backoff_seconds, initial * multiplier ** k)``.
    """

    def __init__(self, config: ReconnectConfig):
        self.config = config
        self.delay = config.initial_backoff_seconds
        self.attempts = 0

    def reset(self) -> None:
        """Forget previous failures after a successful connect."""
        self.delay = self.config.initial_backoff_seconds
        self.attempts = 0

    def record_failure(self) -> float:
        """Grow the delay for one failed or ended attempt and return it."""
        self.attempts += 1
        self.delay = min(self.config.max_backoff_seconds, self.delay * self.config.backoff_multiplier)
        return self.delay

    @property
    def exhausted(self) -> bool:
        max_attempts = self.config.max_attempts
        return max_attempts is not None and self.attempts >= max_attempts

    def sleep_seconds(self) -> float:
        """Duration to actually sleep for the current delay."""
        if not self.config.jitter:
            return self.delay
        # Add jitter: +/-25% of the delay
        jitter_range = self.delay * 0.25
        return max(0.0, self.delay + random.uniform(-jitter_range, jitter_range))
