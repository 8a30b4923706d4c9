"""Aggregate tick streams into fixed-width bars.

Ticks are bucketed by their timestamp rounded down to ``period`` in the
tick's own (exchange local) time zone.  Buckets are formed from consecutive
ticks, so the input must already be time ordered, which Alpaca guarantees
for ``sort=asc`` requests.  Both helpers are lazy.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import timedelta
from itertools import chain, groupby

from alpaca_history.market.symbols import Symbol
from alpaca_history.timeutils import UTC, round_down

from .models import QuoteBar, Tick, TradeBar


def _buckets(ticks: Iterable[Tick], period: timedelta):
    # keyed by UTC instant: same-zone datetimes compare equal across a DST fold
    for _, group in groupby(ticks, key=lambda tick: round_down(tick.time, period).astimezone(UTC)):
        first = next(group)
        yield round_down(first.time, period), chain((first,), group)


def aggregate_ticks_to_trade_bars(ticks: Iterable[Tick], symbol: Symbol, period: timedelta) -> Iterator[TradeBar]:
    """Yield one :class:`TradeBar` per non-empty ``period`` of trade ticks."""
    for start, group in _buckets(ticks, period):
        bar: TradeBar | None = None
        for tick in group:
            if bar is None:
                bar = TradeBar(start, symbol, tick.price, tick.price, tick.price, tick.price, tick.quantity, period)
            else:
                bar.update(tick.price, tick.quantity)
        if bar is not None:
            yield bar


def aggregate_quote_ticks(ticks: Iterable[Tick], symbol: Symbol, period: timedelta) -> Iterator[QuoteBar]:
    """Yield one :class:`QuoteBar` per non-empty ``period`` of quote ticks."""
    for start, group in _buckets(ticks, period):
        bar = QuoteBar(start, symbol, period)
        for tick in group:
            bar.update(tick.bid_price, tick.ask_price, tick.bid_size, tick.ask_size)
        yield bar


__all__ = ["aggregate_quote_ticks", "aggregate_ticks_to_trade_bars"]
