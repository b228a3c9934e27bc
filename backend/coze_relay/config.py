"""
Relay configuration.

Values come from environment variables (populated from .env by main.py).
The handler never touches os.environ directly; it asks a SettingsProvider,
so tests can hand it a fixed RelaySettings instead.
"""
import os
import math
import logging
from typing import List, Optional, Protocol

from pydantic import BaseModel

log = logging.getLogger("relay")

DEFAULT_BASE_URL = "https://api.coze.com"
DEFAULT_POLL_INTERVAL_S = 1.0
DEFAULT_MAX_POLL_ATTEMPTS = 30
DEFAULT_TIMEOUT_S = 10.0
DEFAULT_USER_ID_PREFIX = "relay"


class RelaySettings(BaseModel):
    """Per-request view of the relay configuration."""
    api_token: Optional[str] = None
    bot_id: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S
    max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS
    timeout_s: float = DEFAULT_TIMEOUT_S
    user_id_prefix: str = DEFAULT_USER_ID_PREFIX

    @property
    def is_configured(self) -> bool:
        return bool(self.api_token) and bool(self.bot_id)


class SettingsProvider(Protocol):
    def get_settings(self) -> RelaySettings:
        ...


def _clean(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _get_float_env(name: str, default: float) -> float:
    raw = _clean(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        value = None
    if value is None or not math.isfinite(value):
        log.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default
    return max(0.0, value)


def _get_int_env(name: str, default: int) -> int:
    raw = _clean(name)
    if raw is None:
        return default
    try:
        return max(0, int(raw))
    except ValueError:
        log.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


class EnvSettingsProvider:
    """Reads the environment on every call, so each request sees current values."""

    def get_settings(self) -> RelaySettings:
        return RelaySettings(
            api_token=_clean("COZE_API_TOKEN"),
            bot_id=_clean("COZE_BOT_ID"),
            base_url=(_clean("COZE_API_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            poll_interval_s=_get_float_env("COZE_POLL_INTERVAL_S", DEFAULT_POLL_INTERVAL_S),
            max_poll_attempts=_get_int_env("COZE_MAX_POLL_ATTEMPTS", DEFAULT_MAX_POLL_ATTEMPTS),
            timeout_s=_get_float_env("COZE_HTTP_TIMEOUT_S", DEFAULT_TIMEOUT_S),
            user_id_prefix=_clean("COZE_USER_ID_PREFIX") or DEFAULT_USER_ID_PREFIX,
        )


class StaticSettingsProvider:
    def __init__(self, settings: RelaySettings):
        self.settings = settings

    def get_settings(self) -> RelaySettings:
        return self.settings


def cors_allow_origins() -> List[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
