"""Shared fixtures: a scripted history client, a fixed clock and settings."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest
from alpaca.common.exceptions import APIError

from alpaca_history.config import Settings, get_settings
from alpaca_history.data.client import Page
from alpaca_history.data.models import HistoryRequest
from alpaca_history.data.provider_requests import ProviderRequest
from alpaca_history.history import AlpacaHistoryProvider
from alpaca_history.market.hours import AlwaysOpenHours
from alpaca_history.messages import RecordingMessageSink

NEW_YORK = ZoneInfo("America/New_York")
NOW = datetime(2024, 6, 17, 18, 0, tzinfo=UTC)

SIP_MESSAGE = "subscription does not permit querying recent SIP data"
OPRA_MESSAGE = "OPRA agreement is not signed"

_ENV_KEYS = (
    "ALPACA_API_KEY",
    "ALPACA_SECRET_KEY",
    "ALPACA_DATA_BASE_URL",
    "ALPACA_DATA_FEED",
    "HISTORY_PAGE_SIZE",
    "ALPACA_RESTRICTED_DELAY_MINUTES",
    "HTTP_TIMEOUT_SECONDS",
    "MARKET_CALENDAR",
    "LOG_LEVEL",
)


class FakeHistoricalClient:
    """Client returning scripted pages or raising scripted errors in order."""

    def __init__(self, *, trades=(), quotes=(), bars=()) -> None:
        self.scripts = {"trades": list(trades), "quotes": list(quotes), "bars": list(bars)}
        self.calls: list[tuple[str, ProviderRequest]] = []

    def _next(self, kind: str, request: ProviderRequest) -> Page:
        self.calls.append((kind, replace(request)))
        script = self.scripts[kind]
        if not script:
            raise AssertionError(f"unexpected {kind} fetch for {request!r}")
        item = script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def fetch_trades(self, request: ProviderRequest) -> Page:
        return self._next("trades", request)

    def fetch_quotes(self, request: ProviderRequest) -> Page:
        return self._next("quotes", request)

    def fetch_bars(self, request: ProviderRequest) -> Page:
        return self._next("bars", request)

    @property
    def requests(self) -> list[ProviderRequest]:
        return [request for _kind, request in self.calls]


def make_page(symbol: str, records: list[dict], token: str | None = None) -> Page:
    return Page(items={symbol: records}, next_page_token=token)


def api_error(message: str) -> APIError:
    return APIError(json.dumps({"code": 42210000, "message": message}))


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def sink() -> RecordingMessageSink:
    return RecordingMessageSink()


@pytest.fixture
def ny_hours() -> AlwaysOpenHours:
    return AlwaysOpenHours(NEW_YORK)


@pytest.fixture
def make_provider(settings, sink):
    def _make(client: FakeHistoricalClient, **kwargs) -> AlpacaHistoryProvider:
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("message_sink", sink)
        kwargs.setdefault("clock", lambda: NOW)
        return AlpacaHistoryProvider(client, **kwargs)

    return _make


@pytest.fixture
def make_request(ny_hours):
    def _make(symbol, resolution, tick_type, *, start=None, end=None, hours=None, extended=False) -> HistoryRequest:
        return HistoryRequest(
            symbol=symbol,
            resolution=resolution,
            tick_type=tick_type,
            start_utc=start or datetime(2024, 6, 17, 13, 30, tzinfo=UTC),
            end_utc=end or datetime(2024, 6, 17, 20, 0, tzinfo=UTC),
            exchange_hours=hours or ny_hours,
            include_extended_market_hours=extended,
        )

    return _make


@pytest.fixture
def fake_client_cls():
    return FakeHistoricalClient


@pytest.fixture
def page():
    return make_page


@pytest.fixture
def provider_error():
    return api_error


@pytest.fixture
def now() -> datetime:
    return NOW
