"""Convert raw Alpaca records into :mod:`alpaca_history.data.models` records.

Alpaca uses single-letter keys: trades carry ``t`` (timestamp), ``x``
(exchange), ``p`` (price), ``s`` (size) and ``c`` (conditions); quotes carry
``ax``/``ap``/``as`` and ``bx``/``bp``/``bs``; bars carry ``o``/``h``/``l``/
``c``/``v``.  Crypto records omit exchange and condition fields.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from datetime import timedelta, tzinfo
from typing import Any

from alpaca_history.market.symbols import Symbol
from alpaca_history.timeframe import TickType
from alpaca_history.timeutils import convert_from_utc, parse_rfc3339

from .models import Tick, TradeBar


def _condition(raw: Mapping[str, Any]) -> str:
    # only the first code is kept, and only when more than one is listed
    conditions = raw.get("c") or []
    if len(conditions) > 1:
        return str(conditions[0])
    return ""


def _float(raw: Mapping[str, Any], key: str) -> float:
    value = raw.get(key)
    return float(value) if value is not None else 0.0


def trade_to_tick(raw: Mapping[str, Any], symbol: Symbol, tz: tzinfo) -> Tick:
    return Tick(
        time=convert_from_utc(parse_rfc3339(raw["t"]), tz),
        symbol=symbol,
        tick_type=TickType.TRADE,
        sale_condition=_condition(raw),
        exchange=str(raw.get("x") or ""),
        quantity=_float(raw, "s"),
        price=_float(raw, "p"),
    )


def quote_to_tick(raw: Mapping[str, Any], symbol: Symbol, tz: tzinfo) -> Tick:
    return Tick(
        time=convert_from_utc(parse_rfc3339(raw["t"]), tz),
        symbol=symbol,
        tick_type=TickType.QUOTE,
        sale_condition=_condition(raw),
        exchange=str(raw.get("ax") or ""),
        bid_size=_float(raw, "bs"),
        bid_price=_float(raw, "bp"),
        ask_size=_float(raw, "as"),
        ask_price=_float(raw, "ap"),
    )


def bar_to_trade_bar(raw: Mapping[str, Any], symbol: Symbol, tz: tzinfo, period: timedelta) -> TradeBar:
    """Return a :class:`TradeBar` spanning ``period`` (the requested resolution)."""
    return TradeBar(
        time=convert_from_utc(parse_rfc3339(raw["t"]), tz),
        symbol=symbol,
        open=_float(raw, "o"),
        high=_float(raw, "h"),
        low=_float(raw, "l"),
        close=_float(raw, "c"),
        volume=_float(raw, "v"),
        period=period,
    )


def convert_trades(records: Iterable[Mapping[str, Any]], symbol: Symbol, tz: tzinfo) -> Iterator[Tick]:
    for raw in records:
        yield trade_to_tick(raw, symbol, tz)


def convert_quotes(records: Iterable[Mapping[str, Any]], symbol: Symbol, tz: tzinfo) -> Iterator[Tick]:
    for raw in records:
        yield quote_to_tick(raw, symbol, tz)


def convert_bars(
    records: Iterable[Mapping[str, Any]], symbol: Symbol, tz: tzinfo, period: timedelta
) -> Iterator[TradeBar]:
    for raw in records:
        yield bar_to_trade_bar(raw, symbol, tz, period)


__all__ = [
    "bar_to_trade_bar",
    "convert_bars",
    "convert_quotes",
    "convert_trades",
    "quote_to_tick",
    "trade_to_tick",
]
