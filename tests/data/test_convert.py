from __future__ import annotations

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from alpaca_history.data.convert import bar_to_trade_bar, convert_trades, quote_to_tick, trade_to_tick
from alpaca_history.market.symbols import Symbol
from alpaca_history.timeframe import TickType

NY = ZoneInfo("America/New_York")
AAPL = Symbol.equity("AAPL")


@pytest.mark.parametrize(
    "conditions,expected",
    [
        (None, ""),
        ([], ""),
        (["@"], ""),
        (["@", "I"], "@"),
        (["F", "T", "I"], "F"),
    ],
)
def test_trade_condition_kept_only_for_multiple_codes(conditions, expected):
    raw = {"t": "2024-06-17T14:00:00Z", "x": "V", "p": 212.5, "s": 100}
    if conditions is not None:
        raw["c"] = conditions

    tick = trade_to_tick(raw, AAPL, NY)

    assert tick.sale_condition == expected


def test_trade_tick_fields():
    raw = {"t": "2024-06-17T14:00:00.987654321Z", "x": "V", "p": 212.5, "s": 100, "i": 52983525029461}

    tick = trade_to_tick(raw, AAPL, NY)

    assert tick.tick_type is TickType.TRADE
    assert tick.time == datetime(2024, 6, 17, 10, 0, 0, 987654, tzinfo=NY)
    assert tick.time.tzinfo is NY
    assert (tick.exchange, tick.price, tick.quantity) == ("V", 212.5, 100.0)
    assert tick.value == 212.5
    assert tick.symbol is AAPL


def test_quote_tick_uses_ask_exchange():
    raw = {
        "t": "2024-06-17T14:00:00Z",
        "ax": "Q", "ap": 212.55, "as": 2,
        "bx": "Z", "bp": 212.45, "bs": 4,
        "c": ["R", "Y"],
    }

    tick = quote_to_tick(raw, AAPL, NY)

    assert tick.tick_type is TickType.QUOTE
    assert tick.exchange == "Q"
    assert tick.sale_condition == "R"
    assert tick.value == pytest.approx(212.50)


def test_crypto_quote_without_exchange_fields():
    raw = {"t": "2024-06-17T14:00:00Z", "ap": 66001.0, "as": 0.5, "bp": 65999.0, "bs": 0.2}

    tick = quote_to_tick(raw, Symbol.crypto("BTCUSD"), UTC)

    assert tick.exchange == ""
    assert tick.sale_condition == ""
    assert tick.time.tzinfo is UTC


def test_missing_numeric_fields_default_to_zero():
    tick = trade_to_tick({"t": "2024-06-17T14:00:00Z"}, AAPL, NY)

    assert (tick.price, tick.quantity) == (0.0, 0.0)


def test_bar_period_is_requested_resolution():
    raw = {"t": "2024-06-17T13:30:00Z", "o": 10, "h": 12, "l": 9, "c": 11, "v": 5000, "n": 42, "vw": 10.7}

    bar = bar_to_trade_bar(raw, AAPL, NY, timedelta(hours=1))

    assert bar.time == datetime(2024, 6, 17, 9, 30, tzinfo=NY)
    assert bar.end_time == datetime(2024, 6, 17, 10, 30, tzinfo=NY)
    assert (bar.open, bar.high, bar.low, bar.close, bar.volume) == (10.0, 12.0, 9.0, 11.0, 5000.0)


def test_convert_trades_is_lazy():
    def records():
        yield {"t": "2024-06-17T14:00:00Z", "p": 1, "s": 1}
        raise AssertionError("consumed too far")

    converted = convert_trades(records(), AAPL, NY)

    assert next(converted).price == 1.0
