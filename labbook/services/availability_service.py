# labbook/services/availability_service.py
"""
Availability Calculator.

Reports which intervals of an instrument are already taken so a client
can grey out slots. Overlap is advisory: by default nothing is rejected
for overlapping another booking. ``check_exclusivity`` is the single
opt-in enforcement point, controlled by
``settings.enforce_instrument_exclusivity``.
"""

from datetime import date, datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import CalendarView
from ..core.exceptions import BookingConflictException, NotFoundException
from ..models.booking import Booking
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import BookedInterval
from ..utils.time_utils import day_window, ensure_utc, month_window, week_window
from .base import BaseService

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    def __init__(self, db: Session, enforce_exclusivity: Optional[bool] = None):
        super().__init__(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.instrument_repository = RepositoryFactory.create_instrument_repository(db)
        self.enforce_exclusivity = (
            settings.enforce_instrument_exclusivity
            if enforce_exclusivity is None
            else enforce_exclusivity
        )

    @BaseService.measure_operation("get_booked_intervals")
    def get_booked_intervals(self, instrument_id: str, day: date) -> List[BookedInterval]:
        """
        Non-cancelled bookings on ``instrument_id`` that start on ``day``.

        ``day`` is a local calendar day in the configured timezone.

        Raises:
            NotFoundException: If the instrument is not in the roster
        """
        if not self.instrument_repository.exists(id=instrument_id):
            raise NotFoundException(
                f"Instrument {instrument_id} not found", code="INSTRUMENT_NOT_FOUND"
            )

        window_start, window_end = day_window(day, settings.tz)
        bookings = self.booking_repository.get_active_starting_between(
            instrument_id, window_start, window_end
        )
        return [
            BookedInterval(
                booking_id=b.id,
                start=b.start,
                end=b.end,
                status=b.status.value,
            )
            for b in bookings
        ]

    def find_overlaps(
        self,
        instrument_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """Active bookings on the instrument whose interval intersects ``[start, end)``."""
        return self.booking_repository.find_overlapping(
            instrument_id, ensure_utc(start), ensure_utc(end), exclude_booking_id
        )

    def has_overlap(
        self,
        instrument_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        return bool(self.find_overlaps(instrument_id, start, end, exclude_booking_id))

    def check_exclusivity(
        self,
        instrument_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """
        Reject an overlapping interval when exclusive scheduling is enabled.

        Raises:
            BookingConflictException: If enabled and the interval overlaps
        """
        if not self.enforce_exclusivity:
            return

        conflicts = self.find_overlaps(instrument_id, start, end, exclude_booking_id)
        if conflicts:
            self.logger.info(
                f"Rejected overlapping booking on instrument {instrument_id}: "
                f"{len(conflicts)} conflict(s)"
            )
            raise BookingConflictException(conflicting_ids=[b.id for b in conflicts])

    @BaseService.measure_operation("get_calendar_bookings")
    def get_calendar_bookings(
        self,
        view: CalendarView,
        anchor: date,
        instrument_id: Optional[str] = None,
    ) -> List[Booking]:
        """Non-cancelled bookings starting in the day, week (Sunday start) or month of ``anchor``."""
        tz = settings.tz
        if view == CalendarView.DAY:
            window = day_window(anchor, tz)
        elif view == CalendarView.WEEK:
            window = week_window(anchor, tz)
        else:
            window = month_window(anchor, tz)

        return self.booking_repository.get_active_in_window(*window, instrument_id=instrument_id)
