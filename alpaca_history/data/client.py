"""HTTP client for the Alpaca historical market-data API.

Each ``fetch_*`` call issues exactly one GET and returns one :class:`Page`;
pagination is driven by :mod:`alpaca_history.data.pagination`.  HTTP errors
are raised as alpaca-py's :class:`~alpaca.common.exceptions.APIError` built
from the response body, the same way the SDK's own REST client reports them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import requests
from requests.exceptions import HTTPError

from alpaca_history.config import Settings, broker_keys, get_settings
from alpaca_history.exc import APIError
from alpaca_history.logging import get_logger
from alpaca_history.logging.redact import redact, redact_headers

from .provider_requests import BAR_REQUESTS, QUOTE_REQUESTS, TRADE_REQUESTS, ProviderRequest

_log = get_logger(__name__)


@dataclass(slots=True)
class Page:
    """One page of raw provider records keyed by provider symbol."""

    items: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    next_page_token: str | None = None

    def records(self, symbol: str) -> list[dict[str, Any]]:
        return self.items.get(symbol) or []

    def __len__(self) -> int:
        return sum(len(v) for v in self.items.values())

    @classmethod
    def from_payload(cls, payload: dict[str, Any], records_key: str) -> Page:
        raw = payload.get(records_key) or {}
        if isinstance(raw, list):
            # single-symbol endpoints return a bare list alongside "symbol"
            raw = {str(payload.get("symbol", "")): raw}
        items = {str(sym): list(rows or []) for sym, rows in raw.items()}
        return cls(items=items, next_page_token=payload.get("next_page_token") or None)


class AlpacaHistoricalClient:
    """Thin wrapper over ``requests.Session`` for Alpaca data endpoints."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._session = session or requests.Session()
        self._base_url = self._settings.alpaca_data_base_url
        self._headers = {**broker_keys(self._settings), "Accept": "application/json"}

    def fetch_trades(self, request: ProviderRequest) -> Page:
        self._check_kind(request, TRADE_REQUESTS, "trades")
        return self._get_page(request)

    def fetch_quotes(self, request: ProviderRequest) -> Page:
        self._check_kind(request, QUOTE_REQUESTS, "quotes")
        return self._get_page(request)

    def fetch_bars(self, request: ProviderRequest) -> Page:
        self._check_kind(request, BAR_REQUESTS, "bars")
        return self._get_page(request)

    @staticmethod
    def _check_kind(request: ProviderRequest, kinds: tuple[type, ...], label: str) -> None:
        if not isinstance(request, kinds):
            raise TypeError(f"{type(request).__name__} is not a {label} request")

    def _params(self, request: ProviderRequest) -> dict[str, Any]:
        params = request.params()
        feed = self._settings.alpaca_data_feed
        if feed and request.path.startswith("/v2/stocks"):
            params["feed"] = feed
        return params

    def _get_page(self, request: ProviderRequest) -> Page:
        url = f"{self._base_url}{request.path}"
        params = self._params(request)
        _log.debug(
            "HISTORY_HTTP_REQUEST",
            extra={"url": url, "params": redact(params), "headers": redact_headers(self._headers)},
        )
        response = self._session.get(
            url,
            params=params,
            headers=self._headers,
            timeout=self._settings.http_timeout_seconds,
        )
        try:
            response.raise_for_status()
        except HTTPError as http_error:
            _log.debug(
                "HISTORY_HTTP_ERROR",
                extra={"url": url, "status": response.status_code, "body": response.text[:500]},
            )
            raise APIError(response.text, http_error) from http_error
        payload = response.json() or {}
        return Page.from_payload(payload, request.records_key)


__all__ = ["AlpacaHistoricalClient", "Page"]
