from __future__ import annotations

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from alpaca_history.timeutils import format_rfc3339, parse_rfc3339, round_down

NY = ZoneInfo("America/New_York")
KOLKATA = ZoneInfo("Asia/Kolkata")


@pytest.mark.parametrize(
    "utc_moment,offset",
    [
        (datetime(2024, 11, 3, 5, 40, tzinfo=UTC), timedelta(hours=-4)),
        (datetime(2024, 11, 3, 6, 40, tzinfo=UTC), timedelta(hours=-5)),
    ],
)
def test_round_down_keeps_offset_across_fall_back(utc_moment, offset):
    floored = round_down(utc_moment.astimezone(NY), timedelta(hours=1))

    assert floored.utcoffset() == offset
    assert floored.astimezone(UTC) == utc_moment.replace(minute=0)


def test_round_down_daily_uses_local_midnight():
    late = datetime(2024, 6, 17, 23, 15, tzinfo=NY)

    assert round_down(late, timedelta(days=1)) == datetime(2024, 6, 17, tzinfo=NY)


def test_round_down_half_hour_offset_zone():
    moment = datetime(2024, 6, 17, 9, 45, tzinfo=KOLKATA)

    assert round_down(moment, timedelta(hours=1)) == datetime(2024, 6, 17, 9, tzinfo=KOLKATA)


def test_rfc3339_trims_nanoseconds():
    parsed = parse_rfc3339("2024-06-17T13:30:00.123456789Z")

    assert parsed == datetime(2024, 6, 17, 13, 30, 0, 123456, tzinfo=UTC)
    assert format_rfc3339(parsed) == "2024-06-17T13:30:00.123456Z"
