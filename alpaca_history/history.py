"""Historical data provider for Alpaca equities, options and crypto.

:meth:`AlpacaHistoryProvider.get_history` is the single entry point.  It
returns ``None`` for requests Alpaca cannot serve (after notifying the
message sink once per condition) and otherwise a lazy iterable of records
restricted to the exchange's trading hours.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from datetime import datetime
from typing import Protocol

from alpaca_history.config import Settings, get_settings
from alpaca_history.logging import get_logger
from alpaca_history.market.symbols import AssetClass, SymbolMapper
from alpaca_history.messages import LoggingMessageSink, MessageSeverity, MessageSink
from alpaca_history.timeframe import Resolution, TickType, to_alpaca_timeframe
from alpaca_history.timeutils import now_utc

from .data.aggregate import aggregate_quote_ticks, aggregate_ticks_to_trade_bars
from .data.client import AlpacaHistoricalClient, Page
from .data.convert import convert_bars, convert_quotes, convert_trades
from .data.models import BaseData, HistoryRequest, QuoteBar, Tick, TradeBar
from .data.pagination import DataRestriction, RestrictionState, paginate
from .data.provider_requests import (
    CryptoBarsRequest,
    CryptoQuotesRequest,
    CryptoTradesRequest,
    OptionBarsRequest,
    OptionTradesRequest,
    ProviderRequest,
    StockBarsRequest,
    StockQuotesRequest,
)

_log = get_logger(__name__)

_TICK_RESOLUTIONS = (Resolution.TICK, Resolution.SECOND)


class HistoricalDataClient(Protocol):
    def fetch_trades(self, request: ProviderRequest) -> Page: ...

    def fetch_quotes(self, request: ProviderRequest) -> Page: ...

    def fetch_bars(self, request: ProviderRequest) -> Page: ...


class AlpacaHistoryProvider:
    """Serve :class:`HistoryRequest` objects from the Alpaca data API.

    One instance owns the subscription :class:`RestrictionState` and the
    one-shot warning latches; share the instance between callers so a
    restriction detected once shapes every later request.
    """

    def __init__(
        self,
        client: HistoricalDataClient | None = None,
        *,
        symbol_mapper: SymbolMapper | None = None,
        message_sink: MessageSink | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client or AlpacaHistoricalClient(self._settings)
        self._symbol_mapper = symbol_mapper or SymbolMapper()
        self._sink = message_sink or LoggingMessageSink()
        self._clock = clock
        self.restrictions = RestrictionState()
        self.fired_warnings: set[str] = set()

    # -- notifications -------------------------------------------------

    def _warn_once(self, key: str, code: str, text: str) -> None:
        if key in self.fired_warnings:
            return
        self.fired_warnings.add(key)
        self._sink.notify(MessageSeverity.WARNING, code, text)

    def _on_restriction(self, restriction: DataRestriction) -> None:
        self._sink.notify(MessageSeverity.WARNING, restriction.code, restriction.warning)

    # -- dispatcher ----------------------------------------------------

    def get_history(self, request: HistoryRequest) -> Iterable[BaseData] | None:
        """Return records for ``request`` or ``None`` when it cannot be served."""
        symbol = request.symbol
        if symbol.asset_class not in self._symbol_mapper.supported:
            self._warn_once(
                "unsupported_security_type",
                "UnsupportedSecurityType",
                f"The security type '{symbol.asset_class.value}' of symbol '{symbol}' is not supported "
                "for historical data retrieval.",
            )
            return None

        brokerage_symbol = self._symbol_mapper.get_brokerage_symbol(symbol)

        if request.start_utc >= request.end_utc:
            self._warn_once(
                "invalid_start_time",
                "InvalidStartTimeUtc",
                "The history request's start time must be earlier than the end time. No data will be returned.",
            )
            return None

        _log.debug(
            "HISTORY_REQUEST",
            extra={
                "symbol": brokerage_symbol,
                "asset_class": symbol.asset_class.value,
                "tick_type": request.tick_type.value,
                "resolution": request.resolution.value,
                "start": request.start_utc.isoformat(),
                "end": request.end_utc.isoformat(),
            },
        )

        if symbol.asset_class is AssetClass.EQUITY:
            data = self._equity_history(request, brokerage_symbol)
        elif symbol.asset_class is AssetClass.OPTION:
            data = self._option_history(request, brokerage_symbol)
        else:
            data = self._crypto_history(request, brokerage_symbol)

        if data is None:
            return None
        hours = request.exchange_hours
        extended = request.include_extended_market_hours
        return (x for x in data if hours.is_open(x.time, x.end_time, extended))

    # -- routers -------------------------------------------------------

    def _equity_history(self, request: HistoryRequest, brokerage_symbol: str) -> Iterable[BaseData] | None:
        if request.tick_type is TickType.TRADE and request.resolution in _TICK_RESOLUTIONS:
            self._warn_once(
                "equity_trade_resolution",
                "InvalidResolution",
                f"The requested resolution '{request.resolution.value}' is not supported for trade tick data. "
                "No historical data will be returned.",
            )
            return None

        if request.tick_type is TickType.TRADE:
            bars = StockBarsRequest(
                brokerage_symbol, request.start_utc, request.end_utc, timeframe=to_alpaca_timeframe(request.resolution)
            )
            return self._trade_bars(request, brokerage_symbol, bars)
        if request.tick_type is TickType.QUOTE:
            quotes = self._quote_ticks(
                request, brokerage_symbol, StockQuotesRequest(brokerage_symbol, request.start_utc, request.end_utc)
            )
            return self._quotes_at_resolution(request, quotes)
        return None

    def _option_history(self, request: HistoryRequest, brokerage_symbol: str) -> Iterable[BaseData] | None:
        if request.tick_type is not TickType.TRADE:
            self._warn_once(
                "option_tick_type",
                "InvalidTickType",
                f"The requested TickType '{request.tick_type.value}' is not supported for option data. "
                f"Only '{TickType.TRADE.value}' type is supported.",
            )
            return None

        if request.resolution in _TICK_RESOLUTIONS:
            trades = self._trade_ticks(
                request, brokerage_symbol, OptionTradesRequest(brokerage_symbol, request.start_utc, request.end_utc)
            )
            return self._trades_at_resolution(request, trades)
        bars = OptionBarsRequest(
            brokerage_symbol, request.start_utc, request.end_utc, timeframe=to_alpaca_timeframe(request.resolution)
        )
        return self._trade_bars(request, brokerage_symbol, bars)

    def _crypto_history(self, request: HistoryRequest, brokerage_symbol: str) -> Iterable[BaseData] | None:
        if request.tick_type is TickType.OPEN_INTEREST:
            self._warn_once(
                "crypto_tick_type",
                "InvalidTickType",
                f"The requested TickType '{request.tick_type.value}' is not supported for crypto data.",
            )
            return None

        if request.tick_type is TickType.TRADE:
            if request.resolution in _TICK_RESOLUTIONS:
                trades = self._trade_ticks(
                    request, brokerage_symbol, CryptoTradesRequest(brokerage_symbol, request.start_utc, request.end_utc)
                )
                return self._trades_at_resolution(request, trades)
            bars = CryptoBarsRequest(
                brokerage_symbol, request.start_utc, request.end_utc, timeframe=to_alpaca_timeframe(request.resolution)
            )
            return self._trade_bars(request, brokerage_symbol, bars)

        quotes = self._quote_ticks(
            request, brokerage_symbol, CryptoQuotesRequest(brokerage_symbol, request.start_utc, request.end_utc)
        )
        return self._quotes_at_resolution(request, quotes)

    # -- aggregation ---------------------------------------------------

    @staticmethod
    def _trades_at_resolution(request: HistoryRequest, trades: Iterator[Tick]) -> Iterable[Tick | TradeBar]:
        if request.resolution is Resolution.TICK:
            return trades
        return aggregate_ticks_to_trade_bars(trades, request.symbol, request.period)

    @staticmethod
    def _quotes_at_resolution(request: HistoryRequest, quotes: Iterator[Tick]) -> Iterable[Tick | QuoteBar]:
        if request.resolution is Resolution.TICK:
            return quotes
        return aggregate_quote_ticks(quotes, request.symbol, request.period)

    # -- fetching ------------------------------------------------------

    def _pages(self, request: ProviderRequest, fetch_page: Callable[[ProviderRequest], Page]) -> Iterator[Page]:
        return paginate(
            request,
            fetch_page,
            state=self.restrictions,
            on_restriction=self._on_restriction,
            clock=self._clock,
            page_size=self._settings.history_page_size,
            delay=self._settings.restricted_delay,
        )

    def _trade_ticks(self, request: HistoryRequest, brokerage_symbol: str, alpaca_request: ProviderRequest) -> Iterator[Tick]:
        tz = request.exchange_hours.time_zone
        for page in self._pages(alpaca_request, self._client.fetch_trades):
            yield from convert_trades(page.records(brokerage_symbol), request.symbol, tz)

    def _quote_ticks(self, request: HistoryRequest, brokerage_symbol: str, alpaca_request: ProviderRequest) -> Iterator[Tick]:
        tz = request.exchange_hours.time_zone
        for page in self._pages(alpaca_request, self._client.fetch_quotes):
            yield from convert_quotes(page.records(brokerage_symbol), request.symbol, tz)

    def _trade_bars(self, request: HistoryRequest, brokerage_symbol: str, alpaca_request: ProviderRequest) -> Iterator[TradeBar]:
        tz = request.exchange_hours.time_zone
        period = request.period
        for page in self._pages(alpaca_request, self._client.fetch_bars):
            yield from convert_bars(page.records(brokerage_symbol), request.symbol, tz, period)


__all__ = ["AlpacaHistoryProvider", "HistoricalDataClient"]
