"""Tabular export of history records."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pandas as pd

from .data.models import BaseData, QuoteBar, Tick, TradeBar

_TICK_COLUMNS = [
    "symbol", "end_time", "tick_type", "exchange", "sale_condition",
    "price", "quantity", "bid_price", "bid_size", "ask_price", "ask_size", "value",
]
_TRADE_BAR_COLUMNS = ["symbol", "end_time", "open", "high", "low", "close", "volume"]
_QUOTE_BAR_COLUMNS = [
    "symbol", "end_time",
    "bid_open", "bid_high", "bid_low", "bid_close",
    "ask_open", "ask_high", "ask_low", "ask_close", "close",
    "last_bid_size", "last_ask_size",
]


def _row(record: BaseData) -> dict[str, Any]:
    row: dict[str, Any] = {"time": record.time, "symbol": str(record.symbol), "end_time": record.end_time}
    if isinstance(record, Tick):
        row.update(
            tick_type=record.tick_type.value,
            exchange=record.exchange,
            sale_condition=record.sale_condition,
            price=record.price,
            quantity=record.quantity,
            bid_price=record.bid_price,
            bid_size=record.bid_size,
            ask_price=record.ask_price,
            ask_size=record.ask_size,
            value=record.value,
        )
    elif isinstance(record, TradeBar):
        row.update(open=record.open, high=record.high, low=record.low, close=record.close, volume=record.volume)
    elif isinstance(record, QuoteBar):
        for side, bar in (("bid", record.bid), ("ask", record.ask)):
            for field in ("open", "high", "low", "close"):
                row[f"{side}_{field}"] = getattr(bar, field) if bar is not None else None
        row.update(close=record.close, last_bid_size=record.last_bid_size, last_ask_size=record.last_ask_size)
    else:
        raise TypeError(f"Unsupported record type: {type(record).__name__}")
    return row


def _columns_for(records: list[BaseData]) -> list[str]:
    if not records:
        return []
    first = records[0]
    if isinstance(first, Tick):
        return _TICK_COLUMNS
    if isinstance(first, TradeBar):
        return _TRADE_BAR_COLUMNS
    return _QUOTE_BAR_COLUMNS


def records_to_frame(records: Iterable[BaseData] | None) -> pd.DataFrame:
    """Return ``records`` as a DataFrame indexed by record ``time``.

    ``None`` and empty inputs produce an empty frame.
    """
    items = list(records or [])
    if not items:
        return pd.DataFrame(index=pd.DatetimeIndex([], name="time"))
    df = pd.DataFrame.from_records([_row(r) for r in items])
    df = df.set_index("time")
    return df.reindex(columns=_columns_for(items))


__all__ = ["records_to_frame"]
