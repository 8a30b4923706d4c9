"""Time-series records produced by the history provider.

Every record exposes ``time`` (exchange local), ``end_time`` and ``symbol``.
Ticks are instantaneous (``end_time == time``); bars span ``period``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from alpaca_history.market.hours import TradingHours
from alpaca_history.market.symbols import AssetClass, Symbol
from alpaca_history.timeframe import Resolution, TickType
from alpaca_history.timeutils import ensure_utc_datetime


@dataclass(slots=True)
class Tick:
    """A single trade or quote."""

    time: datetime
    symbol: Symbol
    tick_type: TickType
    sale_condition: str = ""
    exchange: str = ""
    quantity: float = 0.0
    price: float = 0.0
    bid_size: float = 0.0
    bid_price: float = 0.0
    ask_size: float = 0.0
    ask_price: float = 0.0

    @property
    def end_time(self) -> datetime:
        return self.time

    @property
    def value(self) -> float:
        """Trade price, or the bid/ask midpoint for quotes."""
        if self.tick_type is TickType.QUOTE:
            if self.bid_price and self.ask_price:
                return (self.bid_price + self.ask_price) / 2
            return self.bid_price or self.ask_price
        return self.price


@dataclass(slots=True)
class TradeBar:
    time: datetime
    symbol: Symbol
    open: float
    high: float
    low: float
    close: float
    volume: float
    period: timedelta

    @property
    def end_time(self) -> datetime:
        return self.time + self.period

    def update(self, price: float, volume: float) -> None:
        self.high = max(self.high, price)
        self.low = min(self.low, price)
        self.close = price
        self.volume += volume


@dataclass(slots=True)
class Bar:
    """Open/high/low/close of one side of a quote."""

    open: float
    high: float
    low: float
    close: float

    @classmethod
    def starting_at(cls, price: float) -> Bar:
        return cls(price, price, price, price)

    def update(self, price: float) -> None:
        self.high = max(self.high, price)
        self.low = min(self.low, price)
        self.close = price


@dataclass(slots=True)
class QuoteBar:
    time: datetime
    symbol: Symbol
    period: timedelta
    bid: Bar | None = None
    ask: Bar | None = None
    last_bid_size: float = 0.0
    last_ask_size: float = 0.0

    @property
    def end_time(self) -> datetime:
        return self.time + self.period

    @property
    def close(self) -> float:
        """Mid close, falling back to whichever side is present."""
        if self.bid is not None and self.ask is not None:
            return (self.bid.close + self.ask.close) / 2
        side = self.bid or self.ask
        return side.close if side is not None else 0.0

    def update(self, bid_price: float, ask_price: float, bid_size: float, ask_size: float) -> None:
        # zero prices mean the side was absent from the quote
        if bid_price:
            if self.bid is None:
                self.bid = Bar.starting_at(bid_price)
            else:
                self.bid.update(bid_price)
            self.last_bid_size = bid_size
        if ask_price:
            if self.ask is None:
                self.ask = Bar.starting_at(ask_price)
            else:
                self.ask.update(ask_price)
            self.last_ask_size = ask_size


BaseData = Tick | TradeBar | QuoteBar


@dataclass(frozen=True)
class HistoryRequest:
    """Immutable description of one historical data request."""

    symbol: Symbol
    resolution: Resolution
    tick_type: TickType
    start_utc: datetime
    end_utc: datetime
    exchange_hours: TradingHours
    include_extended_market_hours: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "start_utc", ensure_utc_datetime(self.start_utc))
        object.__setattr__(self, "end_utc", ensure_utc_datetime(self.end_utc))

    @property
    def asset_class(self) -> AssetClass:
        return self.symbol.asset_class

    @property
    def period(self) -> timedelta:
        return self.resolution.to_timedelta()


__all__ = ["BaseData", "Bar", "HistoryRequest", "QuoteBar", "Tick", "TradeBar"]
