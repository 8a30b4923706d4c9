"""Configuration package exposing typed runtime settings."""

from __future__ import annotations

from .settings import (
    DEFAULT_DATA_BASE_URL,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RESTRICTED_DELAY_MINUTES,
    Settings,
    broker_keys,
    get_settings,
)

__all__ = [
    "DEFAULT_DATA_BASE_URL",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_RESTRICTED_DELAY_MINUTES",
    "Settings",
    "broker_keys",
    "get_settings",
]
