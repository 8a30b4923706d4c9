"""Exchange trading hours used to filter historical records.

:class:`ExchangeHours` wraps a :mod:`pandas_market_calendars` calendar and
answers whether an interval touches a regular (or extended) session.
:class:`AlwaysOpenHours` serves 24/7 venues such as crypto.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo

import pandas as pd
import pandas_market_calendars as mcal

from alpaca_history.logging import get_logger
from alpaca_history.market.symbols import AssetClass
from alpaca_history.timeutils import UTC, ensure_utc_datetime

logger = get_logger(__name__)

_Window = tuple[datetime, datetime]


class TradingHours(Protocol):
    time_zone: tzinfo

    def is_open(self, start: datetime, end: datetime, include_extended: bool = False) -> bool: ...


def _overlaps(windows: list[_Window], start: datetime, end: datetime) -> bool:
    if start == end:
        return any(open_ <= start < close for open_, close in windows)
    return any(open_ < end and start < close for open_, close in windows)


class AlwaysOpenHours:
    """Trading hours for venues that never close."""

    def __init__(self, time_zone: tzinfo | str = UTC) -> None:
        self.time_zone = ZoneInfo(time_zone) if isinstance(time_zone, str) else time_zone

    def is_open(self, start: datetime, end: datetime, include_extended: bool = False) -> bool:
        return True

    def __repr__(self) -> str:
        return f"AlwaysOpenHours({self.time_zone})"


DEFAULT_CALENDAR = "NYSE"

# exchange_calendars mirrors carry no pre/post market times
_EXTENDED_ALIASES = {"XNYS": "NYSE"}


class ExchangeHours:
    """Session lookup for an exchange calendar such as ``NYSE``.

    Sessions are loaded one calendar day at a time and cached, so filtering a
    long record stream costs one schedule query per distinct day.
    """

    def __init__(self, calendar: str = DEFAULT_CALENDAR) -> None:
        self.calendar_name = _EXTENDED_ALIASES.get(calendar.strip().upper(), calendar)
        self._calendar = mcal.get_calendar(self.calendar_name)
        self.time_zone = ZoneInfo(str(self._calendar.tz))
        self._has_extended = {"pre", "post"} <= set(self._calendar.regular_market_times)
        self._sessions: dict[date, tuple[_Window | None, _Window | None]] = {}
        self._extended_warned = False

    @property
    def has_extended(self) -> bool:
        """Whether the calendar defines pre and post market sessions."""
        return self._has_extended

    def __repr__(self) -> str:
        return f"ExchangeHours({self.calendar_name!r})"

    def _load_day(self, day: date) -> tuple[_Window | None, _Window | None]:
        cached = self._sessions.get(day)
        if cached is not None:
            return cached
        if self._has_extended:
            schedule = self._calendar.schedule(start_date=day, end_date=day, start="pre", end="post")
        else:
            schedule = self._calendar.schedule(start_date=day, end_date=day)
        if schedule.empty:
            sessions: tuple[_Window | None, _Window | None] = (None, None)
        else:
            row = schedule.iloc[0]
            regular = (row["market_open"].to_pydatetime(), row["market_close"].to_pydatetime())
            pre = row.get("pre")
            post = row.get("post")
            extended = (
                regular[0] if pre is None or pd.isna(pre) else pre.to_pydatetime(),
                regular[1] if post is None or pd.isna(post) else post.to_pydatetime(),
            )
            sessions = (regular, extended)
        self._sessions[day] = sessions
        logger.debug(
            "EXCHANGE_SESSION_LOADED",
            extra={"calendar": self.calendar_name, "day": day.isoformat(), "open": sessions[0] is not None},
        )
        return sessions

    def sessions(self, start: datetime, end: datetime, include_extended: bool = False) -> list[_Window]:
        """Return UTC session windows for local days touching ``[start, end]``."""
        if include_extended and not self._has_extended and not self._extended_warned:
            self._extended_warned = True
            logger.warning("EXCHANGE_EXTENDED_HOURS_UNAVAILABLE", extra={"calendar": self.calendar_name})
        first = start.astimezone(self.time_zone).date() - timedelta(days=1)
        last = end.astimezone(self.time_zone).date()
        windows: list[_Window] = []
        day = first
        while day <= last:
            regular, extended = self._load_day(day)
            window = extended if include_extended else regular
            if window is not None:
                windows.append(window)
            day += timedelta(days=1)
        return windows

    def is_open(self, start: datetime, end: datetime, include_extended: bool = False) -> bool:
        """Return whether ``[start, end)`` touches a trading session.

        Naive datetimes are interpreted in the exchange time zone.
        """
        start = self._as_utc(start)
        end = self._as_utc(end)
        return _overlaps(self.sessions(start, end, include_extended), start, end)

    def _as_utc(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=self.time_zone)
        return ensure_utc_datetime(value)


def hours_for(asset_class: AssetClass, calendar: str = DEFAULT_CALENDAR) -> TradingHours:
    """Return default trading hours for ``asset_class``."""
    if asset_class is AssetClass.CRYPTO:
        return AlwaysOpenHours(UTC)
    return ExchangeHours(calendar)


__all__ = ["DEFAULT_CALENDAR", "AlwaysOpenHours", "ExchangeHours", "TradingHours", "hours_for"]
