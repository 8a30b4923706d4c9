from __future__ import annotations

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from alpaca_history.data.aggregate import aggregate_quote_ticks, aggregate_ticks_to_trade_bars
from alpaca_history.data.models import Tick
from alpaca_history.market.symbols import Symbol
from alpaca_history.timeframe import TickType

NY = ZoneInfo("America/New_York")
SPY = Symbol.equity("SPY")


def _trade(minute: int, second: float, price: float, size: float) -> Tick:
    whole = int(second)
    micro = int(round((second - whole) * 1_000_000))
    return Tick(datetime(2024, 6, 17, 10, minute, whole, micro, tzinfo=NY), SPY, TickType.TRADE, price=price, quantity=size)


def _quote(minute: int, bid: float, ask: float, bid_size: float = 1, ask_size: float = 1) -> Tick:
    return Tick(
        datetime(2024, 6, 17, 10, minute, 15, tzinfo=NY),
        SPY,
        TickType.QUOTE,
        bid_price=bid,
        ask_price=ask,
        bid_size=bid_size,
        ask_size=ask_size,
    )


def test_trade_bars_per_minute():
    ticks = [_trade(0, 1, 500.0, 10), _trade(0, 30, 501.0, 5), _trade(0, 59.9, 499.5, 1), _trade(2, 0, 502.0, 3)]

    bars = list(aggregate_ticks_to_trade_bars(ticks, SPY, timedelta(minutes=1)))

    assert len(bars) == 2
    first, second = bars
    assert first.time == datetime(2024, 6, 17, 10, 0, tzinfo=NY)
    assert (first.open, first.high, first.low, first.close, first.volume) == (500.0, 501.0, 499.5, 499.5, 16.0)
    assert second.time == datetime(2024, 6, 17, 10, 2, tzinfo=NY)
    assert second.end_time == datetime(2024, 6, 17, 10, 3, tzinfo=NY)


def test_daily_buckets_start_at_exchange_midnight():
    ticks = [_trade(0, 0, 1.0, 1), _trade(59, 0, 2.0, 1)]

    (bar,) = aggregate_ticks_to_trade_bars(ticks, SPY, timedelta(days=1))

    assert bar.time == datetime(2024, 6, 17, 0, 0, tzinfo=NY)


def test_quote_bars_skip_missing_sides():
    ticks = [_quote(0, 10.0, 0.0, bid_size=7), _quote(0, 10.1, 10.3, ask_size=2), _quote(1, 0.0, 10.4, ask_size=9)]

    first, second = aggregate_quote_ticks(ticks, SPY, timedelta(minutes=1))

    assert (first.bid.open, first.bid.close) == (10.0, 10.1)
    assert (first.ask.open, first.ask.close) == (10.3, 10.3)
    assert (first.last_bid_size, first.last_ask_size) == (1.0, 2.0)
    assert second.bid is None
    assert second.ask.close == 10.4
    assert second.close == 10.4
    assert first.close == (10.1 + 10.3) / 2


def test_empty_input_yields_nothing():
    assert list(aggregate_ticks_to_trade_bars([], SPY, timedelta(seconds=1))) == []
    assert list(aggregate_quote_ticks([], SPY, timedelta(seconds=1))) == []


def test_hourly_bars_keep_repeated_fall_back_hour_apart():
    # 01:30 EDT then 01:30 EST on 2024-11-03
    ticks = [
        Tick(datetime(2024, 11, 3, 5, 30, tzinfo=UTC).astimezone(NY), SPY, TickType.TRADE, price=1.0, quantity=1),
        Tick(datetime(2024, 11, 3, 6, 30, tzinfo=UTC).astimezone(NY), SPY, TickType.TRADE, price=2.0, quantity=1),
    ]

    bars = list(aggregate_ticks_to_trade_bars(ticks, SPY, timedelta(hours=1)))

    assert [bar.close for bar in bars] == [1.0, 2.0]
    assert [bar.time.astimezone(UTC) for bar in bars] == [
        datetime(2024, 11, 3, 5, tzinfo=UTC),
        datetime(2024, 11, 3, 6, tzinfo=UTC),
    ]
