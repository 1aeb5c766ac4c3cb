"""Configuration settings using Pydantic for validation."""

import os
import re
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..clients.market_ws import DEFAULT_MARKET_WS_URL
from ..clients.user_ws import DEFAULT_USER_WS_URL
from ..utils.retry import ReconnectConfig


class MarketConfig(BaseModel):
    """Market channel configuration."""
    ws_url: str = Field(default=DEFAULT_MARKET_WS_URL, description="Market channel WebSocket URL")
    asset_ids: List[str] = Field(default_factory=list, description="Asset (token) ids to subscribe to")
    ping_interval_seconds: Optional[float] = Field(default=5.0, description="Keep-alive ping interval")
    ping_timeout_seconds: Optional[float] = Field(default=10.0, description="Pong wait before the socket is considered dead")
    open_timeout_seconds: Optional[float] = Field(default=10.0, description="Connect and handshake timeout")
    max_unsupported_frames: Optional[int] = Field(
        default=None, ge=1,
        description="Consecutive binary frames that force a reconnect; None never reconnects on them"
    )


class UserConfig(BaseModel):
    """Authenticated user channel configuration."""
    ws_url: str = Field(default=DEFAULT_USER_WS_URL, description="User channel WebSocket URL")
    api_key: Optional[str] = Field(default=None, description="CLOB API key")
    api_secret: Optional[str] = Field(default=None, description="CLOB API secret")
    api_passphrase: Optional[str] = Field(default=None, description="CLOB API passphrase")
    markets: List[str] = Field(default_factory=list, description="Condition ids to filter on; empty means all")
    ping_interval_seconds: Optional[float] = Field(default=5.0, description="Keep-alive ping interval")
    ping_timeout_seconds: Optional[float] = Field(default=10.0, description="Pong wait before the socket is considered dead")
    open_timeout_seconds: Optional[float] = Field(default=10.0, description="Connect and handshake timeout")

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_secret and self.api_passphrase)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")
    output: str = Field(default="stdout", description="Log output destination")

    @field_validator('format')
    @classmethod
    def validate_format(cls, v):
        if v.lower() not in ['json', 'text']:
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class HealthConfig(BaseModel):
    """Health check server configuration."""
    enabled: bool = Field(default=False, description="Serve /health, /ready and /live")
    host: str = Field(default="0.0.0.0", description="Health check server host")
    port: int = Field(default=8080, description="Health check server port")


class ClobStreamSettings(BaseSettings):
    """Main streaming service settings."""
    model_config = SettingsConfigDict(
        env_prefix="CLOB_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    service_name: str = Field(default="clob-stream", description="Service name")
    environment: str = Field(default="local", description="Environment: local, dev, prod")

    market: MarketConfig = Field(default_factory=MarketConfig)
    user: UserConfig = Field(default_factory=UserConfig)
    reconnect: ReconnectConfig = Field(default_factory=ReconnectConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    health: HealthConfig = Field(default_factory=HealthConfig)

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        if v not in ['local', 'dev', 'prod', 'test']:
            raise ValueError("Environment must be 'local', 'dev', 'prod' or 'test'")
        return v


def substitute_env_vars(obj: Any) -> Any:
    """
    Recursively substitute environment variables in configuration objects.

    Supports syntax:
    - ${VAR_NAME} - Required variable (raises error if not found)
    - ${VAR_NAME:-default} - Optional variable with default value

    Raises:
        ValueError: If required environment variable is not found
    """
    if isinstance(obj, dict):
        return {key: substitute_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [substitute_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        def replace_env_var(match):
            var_expr = match.group(1)

            if ':-' in var_expr:
                var_name, default_value = var_expr.split(':-', 1)
                return os.getenv(var_name.strip(), default_value)

            var_name = var_expr.strip()
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable '{var_name}' is not set")
            return value

        return re.sub(r'\$\{([^}]+)\}', replace_env_var, obj)
    else:
        return obj


def load_settings(config_file: Optional[str] = None) -> ClobStreamSettings:
    """
    Load settings from a YAML config file and environment variables.

    The config file supports ${VAR_NAME} substitution. Values from the file
    are passed as init arguments, so they win over CLOB_* variables for the
    keys they set.

    Raises:
        ValueError: If required environment variables are missing
        FileNotFoundError: If config file doesn't exist
    """
    if config_file and os.path.exists(config_file):
        import yaml

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        config_data = substitute_env_vars(raw_config)
        return ClobStreamSettings(**config_data)

    elif config_file:
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    return ClobStreamSettings()
