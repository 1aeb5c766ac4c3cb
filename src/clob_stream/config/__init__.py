"""Service configuration."""

from .settings import (
    ClobStreamSettings,
    HealthConfig,
    LoggingConfig,
    MarketConfig,
    UserConfig,
    load_settings,
)

__all__ = [
    "ClobStreamSettings",
    "HealthConfig",
    "LoggingConfig",
    "MarketConfig",
    "UserConfig",
    "load_settings",
]
