from __future__ import annotations

import re
from datetime import UTC, date, datetime, timedelta, tzinfo
from typing import Any


# Alpaca timestamps carry up to nanosecond precision; datetime keeps microseconds.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def now_utc() -> datetime:
    """Repository-standard aware now in UTC."""

    return datetime.now(UTC)


def ensure_utc_datetime(value: Any) -> datetime:
    """Normalize ``value`` to a timezone-aware UTC datetime.

    Naive datetimes are interpreted as UTC; dates map to midnight UTC and
    strings are parsed as ISO-8601 / RFC-3339.
    """

    try:
        if isinstance(value, datetime):
            return value.astimezone(UTC) if value.tzinfo else value.replace(tzinfo=UTC)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day, tzinfo=UTC)
        if isinstance(value, str):
            return parse_rfc3339(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid datetime input: {value!r}") from e
    raise TypeError(f"Unsupported datetime type: {type(value).__name__}")


def parse_rfc3339(value: str) -> datetime:
    """Parse an Alpaca RFC-3339 timestamp into an aware UTC datetime."""

    text = _FRACTION_RE.sub(r"\1", value.strip()).replace("Z", "+00:00")
    parsed = datetime.fromisoformat(text)
    return parsed.astimezone(UTC) if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def format_rfc3339(value: datetime) -> str:
    """Return ``value`` as an RFC-3339 UTC string with a ``Z`` suffix."""

    dt = ensure_utc_datetime(value)
    return dt.isoformat().replace("+00:00", "Z")


def convert_from_utc(value: datetime, tz: tzinfo) -> datetime:
    """Return ``value`` (UTC) expressed in ``tz``."""

    return ensure_utc_datetime(value).astimezone(tz)


def round_down(value: datetime, period: timedelta) -> datetime:
    """Floor ``value`` to a multiple of ``period`` on its own wall clock.

    Aware datetimes are floored in local time so daily buckets start at the
    exchange's midnight rather than UTC midnight.  When the UTC offset is a
    multiple of ``period`` the floor is taken in UTC instead, which gives the
    same wall-clock bucket and keeps the repeated hour of a DST fall-back
    apart.
    """

    if period <= timedelta(0):
        return value
    offset = value.utcoffset()
    if offset is not None and offset % period == timedelta(0):
        utc = value.astimezone(UTC).replace(tzinfo=None)
        floored = datetime.min + ((utc - datetime.min) // period) * period
        return floored.replace(tzinfo=UTC).astimezone(value.tzinfo)
    naive = value.replace(tzinfo=None)
    floored = datetime.min + ((naive - datetime.min) // period) * period
    return floored.replace(tzinfo=value.tzinfo)


__all__ = [
    "UTC",
    "convert_from_utc",
    "ensure_utc_datetime",
    "format_rfc3339",
    "now_utc",
    "parse_rfc3339",
    "round_down",
]
