# labbook/utils/time_utils.py
from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple, Union


def ensure_utc(value: datetime) -> datetime:
    """
    Return ``value`` as an aware UTC datetime.

    Naive datetimes are taken to already be in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Union[str, datetime]) -> datetime:
    """
    Parse an ISO-8601 timestamp (a trailing ``Z`` is accepted) into aware UTC.

    Raises:
        ValueError: If the string is not a valid timestamp.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def derive_end(start: datetime, duration_minutes: float) -> datetime:
    """Start plus duration. No rounding is applied to the result."""
    return start + timedelta(minutes=duration_minutes)


def round_to_slot(value: datetime, slot_minutes: int = 30) -> datetime:
    """
    Round ``value`` up to the next slot boundary, counted from midnight.

    Seconds and microseconds count toward the remainder, so 09:00:01 rounds
    to 09:30. A value already on a boundary is returned unchanged.
    """
    if slot_minutes <= 0:
        raise ValueError(f"slot_minutes must be positive: {slot_minutes}")

    slot = timedelta(minutes=slot_minutes)
    midnight = value.replace(hour=0, minute=0, second=0, microsecond=0)
    remainder = (value - midnight) % slot
    if not remainder:
        return value
    return value + (slot - remainder)


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open overlap test: intervals that only touch do not overlap."""
    return a_start < b_end and b_start < a_end


def duration_hours(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def local_date(value: datetime, tz: tzinfo) -> date:
    return ensure_utc(value).astimezone(tz).date()


def same_day(a: datetime, b: datetime, tz: tzinfo) -> bool:
    return local_date(a, tz) == local_date(b, tz)


def day_window(day: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    """
    Local ``[00:00:00.000, 23:59:59.999999]`` of ``day``, returned in UTC.
    """
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day, time.max, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_window(day: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    """Sunday-to-Saturday week containing ``day``, returned in UTC."""
    first = week_start(day)
    start, _ = day_window(first, tz)
    _, end = day_window(first + timedelta(days=6), tz)
    return start, end


def month_window(day: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    """Calendar month containing ``day``, returned in UTC."""
    last = calendar.monthrange(day.year, day.month)[1]
    start, _ = day_window(day.replace(day=1), tz)
    _, end = day_window(day.replace(day=last), tz)
    return start, end


def iso_week_key(value: datetime, tz: tzinfo) -> str:
    """
    ``YYYY-Www`` using the ISO week-numbering year.

    Dates around New Year take the ISO year, so 2024-12-30 is ``2025-W01``.
    """
    iso_year, iso_week, _ = local_date(value, tz).isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def format_range(start: datetime, end: datetime, tz: Optional[tzinfo] = None) -> str:
    """Human-readable interval shown in notification emails."""
    if tz is not None:
        start = ensure_utc(start).astimezone(tz)
        end = ensure_utc(end).astimezone(tz)
    if start.date() == end.date():
        return f"{start:%b %d, %Y} {start:%H:%M} - {end:%H:%M}"
    return f"{start:%b %d, %Y %H:%M} - {end:%b %d, %Y %H:%M}"
