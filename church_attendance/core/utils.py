"""General utility functions."""
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

from church_attendance.core.constants import REASON_LABELS


def normalize_date(value: Union[str, date, datetime]) -> date:
    """
    Normalize a calendar date, dropping any time component.

    Accepts "2024-05-05", "2024-05-05T10:30:00Z", a date or a datetime.

    Raises:
        ValueError: If the value is not a recognizable date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Date is required")
    return date.fromisoformat(value.strip().split("T")[0])


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC timezone."""
    if dt.tzinfo is None:
        # Assume UTC if no timezone
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def today_in(tz: ZoneInfo) -> date:
    """Today's calendar date in the church's timezone."""
    return datetime.now(tz).date()


def week_range(today: date) -> Tuple[date, date]:
    """Sunday through Saturday of the week containing ``today``."""
    # date.weekday(): Monday=0 .. Sunday=6
    days_since_sunday = (today.weekday() + 1) % 7
    start = today - timedelta(days=days_since_sunday)
    return start, start + timedelta(days=6)


def resolve_date_range(
    from_date: Optional[Union[str, date]],
    to_date: Optional[Union[str, date]],
    tz: ZoneInfo,
) -> Tuple[date, date]:
    """Use the given bounds, defaulting each missing one to the current week."""
    week_start, week_end = week_range(today_in(tz))
    start = normalize_date(from_date) if from_date else week_start
    end = normalize_date(to_date) if to_date else week_end
    return start, end


def format_reason(reason: Optional[str]) -> Optional[str]:
    """Human label for an absence reason."""
    return REASON_LABELS.get(reason, reason)


def format_service_date(value: date, with_year: bool = False) -> str:
    """Long form date used in messages: "Sunday, May 5" or "Sunday, May 5, 2024"."""
    label = f"{value.strftime('%A')}, {value.strftime('%B')} {value.day}"
    if with_year:
        label += f", {value.year}"
    return label


def first_name(full_name: str) -> str:
    return full_name.strip().split(" ")[0] if full_name and full_name.strip() else ""


def isoformat_or_none(value: Optional[Union[date, datetime]]) -> Optional[str]:
    return value.isoformat() if value is not None else None
