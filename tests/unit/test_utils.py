from datetime import date, datetime, timezone, timedelta
from zoneinfo import ZoneInfo

import pytest

from church_attendance.core.utils import (
    first_name,
    format_reason,
    format_service_date,
    normalize_date,
    resolve_date_range,
    to_utc,
    week_range,
)


def test_normalize_date_accepts_iso_strings():
    assert normalize_date("2024-05-05") == date(2024, 5, 5)
    assert normalize_date("2024-05-05T10:30:00Z") == date(2024, 5, 5)


def test_normalize_date_accepts_date_and_datetime():
    assert normalize_date(date(2024, 5, 5)) == date(2024, 5, 5)
    assert normalize_date(datetime(2024, 5, 5, 23, 59)) == date(2024, 5, 5)


@pytest.mark.parametrize("value", ["", "   ", "May 5th", None])
def test_normalize_date_rejects_garbage(value):
    with pytest.raises(ValueError):
        normalize_date(value)


def test_to_utc_assumes_naive_is_utc():
    naive = datetime(2024, 5, 5, 12, 0)
    assert to_utc(naive) == datetime(2024, 5, 5, 12, 0, tzinfo=timezone.utc)


def test_to_utc_converts_aware():
    eastern = datetime(2024, 5, 5, 8, 0, tzinfo=timezone(timedelta(hours=-4)))
    assert to_utc(eastern) == datetime(2024, 5, 5, 12, 0, tzinfo=timezone.utc)


def test_week_range_runs_sunday_to_saturday():
    # Wednesday
    assert week_range(date(2024, 5, 8)) == (date(2024, 5, 5), date(2024, 5, 11))
    # Sunday is the first day of its own week
    assert week_range(date(2024, 5, 5)) == (date(2024, 5, 5), date(2024, 5, 11))
    # Saturday is the last
    assert week_range(date(2024, 5, 11)) == (date(2024, 5, 5), date(2024, 5, 11))


def test_resolve_date_range_keeps_given_bounds():
    start, end = resolve_date_range("2024-04-01", "2024-04-30", ZoneInfo("America/New_York"))
    assert (start, end) == (date(2024, 4, 1), date(2024, 4, 30))


def test_resolve_date_range_defaults_to_current_week():
    start, end = resolve_date_range(None, None, ZoneInfo("America/New_York"))
    assert (end - start).days == 6
    assert start.weekday() == 6  # Sunday


def test_format_service_date():
    assert format_service_date(date(2024, 5, 5)) == "Sunday, May 5"
    assert format_service_date(date(2024, 5, 5), with_year=True) == "Sunday, May 5, 2024"


def test_format_reason():
    assert format_reason("sick") == "Sick / Prayer Request"
    assert format_reason("weather") == "weather"


def test_first_name():
    assert first_name("Ruth Moab") == "Ruth"
    assert first_name("  ") == ""
