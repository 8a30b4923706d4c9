"""Alpaca market-data request shapes.

One class per (asset class, data kind) pair the history provider issues.
Each knows its REST path, the response key holding the records and how to
render its query parameters.  ``page_token`` and ``limit`` carry pagination
state and are only mutated on per-fetch copies.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, ClassVar

from alpaca_history.timeframe import TimeFrame
from alpaca_history.timeutils import format_rfc3339


@dataclass
class ProviderRequest:
    symbol: str
    start: datetime
    end: datetime
    page_token: str | None = None
    limit: int | None = None

    path: ClassVar[str] = ""
    records_key: ClassVar[str] = ""
    is_crypto: ClassVar[bool] = False

    def with_window(self, start: datetime, end: datetime) -> ProviderRequest:
        """Return a copy covering ``[start, end]`` with pagination reset."""
        return replace(self, start=start, end=end, page_token=None)

    def params(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "symbols": self.symbol,
            "start": format_rfc3339(self.start),
            "end": format_rfc3339(self.end),
            "sort": "asc",
        }
        if self.limit is not None:
            params["limit"] = self.limit
        if self.page_token:
            params["page_token"] = self.page_token
        return params


@dataclass
class _BarsRequestMixin:
    timeframe: TimeFrame | None = None

    records_key: ClassVar[str] = "bars"

    def params(self) -> dict[str, Any]:
        params = super().params()  # type: ignore[misc]
        if self.timeframe is not None:
            params["timeframe"] = self.timeframe.value
        return params


@dataclass
class StockBarsRequest(_BarsRequestMixin, ProviderRequest):
    path: ClassVar[str] = "/v2/stocks/bars"


@dataclass
class StockQuotesRequest(ProviderRequest):
    path: ClassVar[str] = "/v2/stocks/quotes"
    records_key: ClassVar[str] = "quotes"


@dataclass
class OptionTradesRequest(ProviderRequest):
    path: ClassVar[str] = "/v1beta1/options/trades"
    records_key: ClassVar[str] = "trades"


@dataclass
class OptionBarsRequest(_BarsRequestMixin, ProviderRequest):
    path: ClassVar[str] = "/v1beta1/options/bars"


@dataclass
class CryptoTradesRequest(ProviderRequest):
    path: ClassVar[str] = "/v1beta3/crypto/us/trades"
    records_key: ClassVar[str] = "trades"
    is_crypto: ClassVar[bool] = True


@dataclass
class CryptoQuotesRequest(ProviderRequest):
    path: ClassVar[str] = "/v1beta3/crypto/us/quotes"
    records_key: ClassVar[str] = "quotes"
    is_crypto: ClassVar[bool] = True


@dataclass
class CryptoBarsRequest(_BarsRequestMixin, ProviderRequest):
    path: ClassVar[str] = "/v1beta3/crypto/us/bars"
    is_crypto: ClassVar[bool] = True


TRADE_REQUESTS = (OptionTradesRequest, CryptoTradesRequest)
QUOTE_REQUESTS = (StockQuotesRequest, CryptoQuotesRequest)
BAR_REQUESTS = (StockBarsRequest, OptionBarsRequest, CryptoBarsRequest)

__all__ = [
    "BAR_REQUESTS",
    "CryptoBarsRequest",
    "CryptoQuotesRequest",
    "CryptoTradesRequest",
    "OptionBarsRequest",
    "OptionTradesRequest",
    "ProviderRequest",
    "QUOTE_REQUESTS",
    "StockBarsRequest",
    "StockQuotesRequest",
    "TRADE_REQUESTS",
]
