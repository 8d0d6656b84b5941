# labbook/services/statistics_service.py
"""
Statistics Aggregator.

Pure functions that summarise a collection of bookings, plus a thin service
that loads the current collections and calls them. The functions only read
``instrument_id``, ``instrument_name``, ``user_id``, ``user_name``,
``start`` and ``end``, never mutate their inputs, and give the same answer
for the same input.

Every booking counts, whatever its status. Hours are summed exactly and
rounded to two decimals only when the result is built.
"""

from collections import OrderedDict
from datetime import date, timedelta, tzinfo
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import HOURS_PRECISION, UNKNOWN_INSTRUMENT_NAME, UNKNOWN_USER_NAME, WEEKDAY_LABELS
from ..repositories.factory import RepositoryFactory
from ..schemas.statistics import BookingStatistics, InstrumentUsage, UserBookingStats, WeeklyUsage
from ..utils.time_utils import duration_hours, iso_week_key, local_date
from .base import BaseService

logger = logging.getLogger(__name__)


def _hours(booking: Any) -> float:
    return duration_hours(booking.start, booking.end)


def _by_hours(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # sorted() is stable, so ties keep first-seen order
    return sorted(rows, key=lambda row: row["total_hours"], reverse=True)


def instrument_usage(
    bookings: Iterable[Any], instruments: Iterable[Any] = ()
) -> List[InstrumentUsage]:
    """
    Booking count and hours per instrument, busiest first.

    Every roster instrument gets a row, even with no bookings. Bookings that
    reference an instrument no longer in the roster get their own row under
    the name recorded on the booking.
    """
    rows: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
    for instrument in instruments:
        rows[instrument.id] = {
            "instrument_id": instrument.id,
            "instrument_name": instrument.name,
            "booking_count": 0,
            "total_hours": 0.0,
        }

    for booking in bookings:
        row = rows.get(booking.instrument_id)
        if row is None:
            row = rows[booking.instrument_id] = {
                "instrument_id": booking.instrument_id,
                "instrument_name": booking.instrument_name or UNKNOWN_INSTRUMENT_NAME,
                "booking_count": 0,
                "total_hours": 0.0,
            }
        row["booking_count"] += 1
        row["total_hours"] += _hours(booking)

    return [
        InstrumentUsage(**{**row, "total_hours": round(row["total_hours"], HOURS_PRECISION)})
        for row in _by_hours(list(rows.values()))
    ]


def user_bookings(bookings: Iterable[Any]) -> List[UserBookingStats]:
    """Booking count and hours per user, busiest first."""
    rows: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
    for booking in bookings:
        row = rows.get(booking.user_id)
        if row is None:
            row = rows[booking.user_id] = {
                "user_id": booking.user_id,
                "user_name": booking.user_name or UNKNOWN_USER_NAME,
                "booking_count": 0,
                "total_hours": 0.0,
            }
        row["booking_count"] += 1
        row["total_hours"] += _hours(booking)

    return [
        UserBookingStats(**{**row, "total_hours": round(row["total_hours"], HOURS_PRECISION)})
        for row in _by_hours(list(rows.values()))
    ]


def weekly_usage_by_iso_week(bookings: Iterable[Any], tz: tzinfo) -> List[WeeklyUsage]:
    """Bookings per ISO week of their local start (``2024-W02``), oldest week first."""
    counts: Dict[str, int] = {}
    for booking in bookings:
        key = iso_week_key(booking.start, tz)
        counts[key] = counts.get(key, 0) + 1
    return [WeeklyUsage(week=key, booking_count=counts[key]) for key in sorted(counts)]


def weekly_usage_trailing_7_days(
    bookings: Iterable[Any], reference_day: date, tz: tzinfo
) -> List[WeeklyUsage]:
    """
    Bookings starting on each of the seven local days ending on ``reference_day``.

    Always seven entries, oldest first, labelled with the weekday (``Mon``).
    """
    days = [reference_day - timedelta(days=offset) for offset in range(6, -1, -1)]
    counts = {day: 0 for day in days}
    for booking in bookings:
        day = local_date(booking.start, tz)
        if day in counts:
            counts[day] += 1
    return [
        WeeklyUsage(week=WEEKDAY_LABELS[day.weekday()], booking_count=counts[day]) for day in days
    ]


def total_bookings(bookings: Sequence[Any]) -> int:
    return len(bookings)


def compute_statistics(
    bookings: Sequence[Any],
    instruments: Iterable[Any] = (),
    tz: Optional[tzinfo] = None,
) -> BookingStatistics:
    """Full statistics bundle, with weekly usage bucketed by ISO week."""
    tz = tz or settings.tz
    bookings = list(bookings)
    return BookingStatistics(
        total_bookings=total_bookings(bookings),
        instrument_usage=instrument_usage(bookings, list(instruments)),
        user_bookings=user_bookings(bookings),
        weekly_usage=weekly_usage_by_iso_week(bookings, tz),
    )


class StatisticsService(BaseService):
    """Loads the current bookings and roster and aggregates them."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.instrument_repository = RepositoryFactory.create_instrument_repository(db)

    @BaseService.measure_operation("get_statistics")
    def get_statistics(self, instrument_id: Optional[str] = None) -> BookingStatistics:
        bookings = self.booking_repository.list_all(instrument_id=instrument_id)
        instruments = self.instrument_repository.list_ordered()
        if instrument_id:
            instruments = [i for i in instruments if i.id == instrument_id]
        return compute_statistics(bookings, instruments, settings.tz)

    def get_trailing_week(self, reference_day: date) -> List[WeeklyUsage]:
        bookings = self.booking_repository.list_all()
        return weekly_usage_trailing_7_days(bookings, reference_day, settings.tz)
