from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pandas as pd

from alpaca_history.data.models import QuoteBar, Tick, TradeBar
from alpaca_history.frames import records_to_frame
from alpaca_history.market.symbols import Symbol
from alpaca_history.timeframe import TickType

NY = ZoneInfo("America/New_York")
AAPL = Symbol.equity("AAPL")
T0 = datetime(2024, 6, 17, 9, 30, tzinfo=NY)


def test_trade_bars_frame():
    bars = [
        TradeBar(T0, AAPL, 1, 2, 0.5, 1.5, 100, timedelta(minutes=1)),
        TradeBar(T0 + timedelta(minutes=1), AAPL, 1.5, 1.6, 1.4, 1.45, 50, timedelta(minutes=1)),
    ]

    df = records_to_frame(bars)

    assert list(df.columns) == ["symbol", "end_time", "open", "high", "low", "close", "volume"]
    assert df.index.name == "time"
    assert df.index[0] == pd.Timestamp(T0)
    assert df["close"].tolist() == [1.5, 1.45]
    assert (df["symbol"] == "AAPL").all()


def test_tick_frame():
    ticks = [Tick(T0, AAPL, TickType.TRADE, exchange="V", price=212.5, quantity=10)]

    df = records_to_frame(ticks)

    row = df.iloc[0]
    assert row["tick_type"] == "trade"
    assert row["exchange"] == "V"
    assert row["price"] == 212.5
    assert row["value"] == 212.5


def test_quote_tick_frame_carries_midpoint():
    ticks = [Tick(T0, AAPL, TickType.QUOTE, bid_price=10.0, bid_size=1, ask_price=10.5, ask_size=2)]

    row = records_to_frame(ticks).iloc[0]

    assert row["value"] == 10.25
    assert row["ask_size"] == 2


def test_quote_bar_frame_with_missing_side():
    bar = QuoteBar(T0, AAPL, timedelta(minutes=1))
    bar.update(10.0, 0.0, 5, 0)

    df = records_to_frame(iter([bar]))

    row = df.iloc[0]
    assert row["bid_close"] == 10.0
    assert pd.isna(row["ask_close"])
    assert row["close"] == 10.0
    assert row["last_bid_size"] == 5


def test_empty_inputs():
    assert records_to_frame(None).empty
    assert records_to_frame([]).empty
