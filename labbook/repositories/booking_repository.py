# labbook/repositories/booking_repository.py
"""
Booking Repository for the lab booking core.

Query helpers used by the lifecycle, availability, delay and statistics
services. "Active" means neither cancelled nor denied.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from ..core.enums import ApprovalState, ProgressState
from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(Booking.comments))

    @staticmethod
    def _active_filter():
        return and_(
            Booking.progress_state != ProgressState.CANCELLED,
            Booking.approval_state != ApprovalState.DENIED,
        )

    def list_all(
        self,
        *,
        user_id: Optional[str] = None,
        instrument_id: Optional[str] = None,
    ) -> List[Booking]:
        """All bookings ordered by start, optionally narrowed by owner or instrument."""
        query = self.db.query(Booking)
        if user_id:
            query = query.filter(Booking.user_id == user_id)
        if instrument_id:
            query = query.filter(Booking.instrument_id == instrument_id)
        return self._execute_query(query.order_by(Booking.start, Booking.id))

    def get_active_starting_between(
        self,
        instrument_id: str,
        window_start: datetime,
        window_end: datetime,
    ) -> List[Booking]:
        """Active bookings on an instrument whose start lies in ``[window_start, window_end]``."""
        query = (
            self.db.query(Booking)
            .filter(
                Booking.instrument_id == instrument_id,
                Booking.start >= window_start,
                Booking.start <= window_end,
                self._active_filter(),
            )
            .order_by(Booking.start)
        )
        return self._execute_query(query)

    def get_active_in_window(
        self,
        window_start: datetime,
        window_end: datetime,
        instrument_id: Optional[str] = None,
    ) -> List[Booking]:
        """Active bookings starting inside a calendar window."""
        query = self.db.query(Booking).filter(
            Booking.start >= window_start,
            Booking.start <= window_end,
            self._active_filter(),
        )
        if instrument_id:
            query = query.filter(Booking.instrument_id == instrument_id)
        return self._execute_query(query.order_by(Booking.start))

    def find_overlapping(
        self,
        instrument_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """Active bookings whose half-open interval intersects ``[start, end)``."""
        query = self.db.query(Booking).filter(
            Booking.instrument_id == instrument_id,
            Booking.start < end,
            Booking.end > start,
            self._active_filter(),
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return self._execute_query(query.order_by(Booking.start))

    def get_starting_at_or_after(self, cutoff: datetime) -> List[Booking]:
        """Every booking with ``start >= cutoff``, whatever its state."""
        query = self.db.query(Booking).filter(Booking.start >= cutoff).order_by(Booking.start)
        return self._execute_query(query)

    def get_upcoming_confirmed(
        self, now: datetime, user_id: Optional[str] = None, limit: int = 5
    ) -> List[Booking]:
        query = self.db.query(Booking).filter(
            Booking.approval_state == ApprovalState.APPROVED,
            Booking.progress_state == ProgressState.NOT_STARTED,
            Booking.start >= now,
        )
        if user_id:
            query = query.filter(Booking.user_id == user_id)
        return self._execute_query(query.order_by(Booking.start).limit(limit))

    def get_current_candidates(
        self,
        day_start: datetime,
        day_end: datetime,
        user_id: Optional[str] = None,
    ) -> List[Booking]:
        """In-progress bookings plus active bookings starting today."""
        query = self.db.query(Booking).filter(
            self._active_filter(),
            or_(
                Booking.progress_state == ProgressState.IN_PROGRESS,
                and_(Booking.start >= day_start, Booking.start <= day_end),
            ),
        )
        if user_id:
            query = query.filter(Booking.user_id == user_id)
        return self._execute_query(query.order_by(Booking.start))

    def get_in_progress_ended_before(self, moment: datetime) -> List[Booking]:
        query = self.db.query(Booking).filter(
            Booking.progress_state == ProgressState.IN_PROGRESS,
            Booking.end < moment,
        )
        return self._execute_query(query)

    def delete_completed(self) -> List[str]:
        """
        Delete every completed booking and its comments.

        Returns:
            Ids of the deleted bookings
        """
        try:
            bookings = (
                self.db.query(Booking)
                .filter(Booking.progress_state == ProgressState.COMPLETED)
                .all()
            )
            ids = [b.id for b in bookings]
            for booking in bookings:
                self.db.delete(booking)
            self.db.flush()
            return ids
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting completed bookings: {str(e)}")
            raise RepositoryException(f"Failed to delete completed bookings: {str(e)}")
