"""Runtime settings with env aliases and safe defaults."""
from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Any

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_BASE_URL = "https://data.alpaca.markets"
DEFAULT_PAGE_SIZE = 10_000
DEFAULT_RESTRICTED_DELAY_MINUTES = 15


def _secret_to_str(val: Any) -> str | None:
    """Return a plain string for SecretStr or str; None if unset."""
    if val is None:
        return None
    if isinstance(val, SecretStr):
        return val.get_secret_value()
    return str(val)


class Settings(BaseSettings):
    alpaca_api_key: str | None = Field(default=None, alias="ALPACA_API_KEY")
    alpaca_secret_key: SecretStr | None = Field(default=None, alias="ALPACA_SECRET_KEY")
    alpaca_data_base_url: str = Field(default=DEFAULT_DATA_BASE_URL, alias="ALPACA_DATA_BASE_URL")
    alpaca_data_feed: str | None = Field(default=None, alias="ALPACA_DATA_FEED")
    history_page_size: int = Field(default=DEFAULT_PAGE_SIZE, alias="HISTORY_PAGE_SIZE", gt=0, le=10_000)
    restricted_delay_minutes: int = Field(
        default=DEFAULT_RESTRICTED_DELAY_MINUTES, alias="ALPACA_RESTRICTED_DELAY_MINUTES", ge=0
    )
    http_timeout_seconds: float = Field(default=10.0, alias="HTTP_TIMEOUT_SECONDS", gt=0)
    market_calendar: str = Field(default="NYSE", alias="MARKET_CALENDAR")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    @field_validator("alpaca_data_base_url")
    @classmethod
    def _strip_base_url(cls, v: str) -> str:
        return (v or DEFAULT_DATA_BASE_URL).strip().rstrip("/") or DEFAULT_DATA_BASE_URL

    @field_validator("alpaca_data_feed")
    @classmethod
    def _normalize_feed(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().lower()
        return v or None

    @property
    def restricted_delay(self) -> timedelta:
        return timedelta(minutes=self.restricted_delay_minutes)

    @property
    def secret_key(self) -> str | None:
        return _secret_to_str(self.alpaca_secret_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()


def broker_keys(s: Settings | None = None) -> dict[str, str]:
    """Return the Alpaca credential headers for the data API."""
    s = s or get_settings()
    return {
        "APCA-API-KEY-ID": s.alpaca_api_key or "",
        "APCA-API-SECRET-KEY": s.secret_key or "",
    }


__all__ = ["Settings", "get_settings", "broker_keys"]
