"""Resolution helpers and their Alpaca ``TimeFrame`` equivalents.

Bars are requested from Alpaca with the SDK's ``TimeFrame`` notation
(``1Min``, ``1Hour``, ``1Day``).  Tick and second resolutions have no bar
endpoint and are served from tick data instead.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum

from alpaca.data.timeframe import TimeFrame, TimeFrameUnit


class Resolution(Enum):
    """Requested data granularity, ordered from finest to coarsest."""

    TICK = "tick"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAILY = "daily"

    def to_timedelta(self) -> timedelta:
        return _RESOLUTION_SPANS[self]

    @classmethod
    def parse(cls, value: str | Resolution) -> Resolution:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown resolution: {value!r}") from None


class TickType(Enum):
    TRADE = "trade"
    QUOTE = "quote"
    OPEN_INTEREST = "open_interest"

    @classmethod
    def parse(cls, value: str | TickType) -> TickType:
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown tick type: {value!r}") from None


_RESOLUTION_SPANS = {
    Resolution.TICK: timedelta(0),
    Resolution.SECOND: timedelta(seconds=1),
    Resolution.MINUTE: timedelta(minutes=1),
    Resolution.HOUR: timedelta(hours=1),
    Resolution.DAILY: timedelta(days=1),
}

_ALPACA_UNITS = {
    Resolution.MINUTE: TimeFrameUnit.Minute,
    Resolution.HOUR: TimeFrameUnit.Hour,
    Resolution.DAILY: TimeFrameUnit.Day,
}


def to_alpaca_timeframe(resolution: Resolution) -> TimeFrame:
    """Return the Alpaca bar ``TimeFrame`` for ``resolution``.

    Raises ``ValueError`` for tick and second resolutions which Alpaca does
    not provide as bars.
    """

    unit = _ALPACA_UNITS.get(resolution)
    if unit is None:
        raise ValueError(f"Resolution {resolution.value!r} has no Alpaca bar timeframe")
    return TimeFrame(1, unit)


__all__ = ["Resolution", "TickType", "TimeFrame", "TimeFrameUnit", "to_alpaca_timeframe"]
