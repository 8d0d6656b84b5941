# labbook/services/delay_service.py
"""
Delay Propagator.

When an instrument goes down, an administrator pushes back every booking
that starts at or after a cutoff by the same number of minutes. Durations
are preserved and overlaps are not re-checked. The shift is all or nothing:
either every selected booking moves or none does.
"""

from datetime import datetime, timedelta
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.constants import BOOKINGS_CACHE_PREFIX, MIN_DELAY_REASON_LENGTH
from ..core.enums import NotificationType
from ..core.exceptions import ForbiddenException, PersistenceException, ValidationException
from ..models.booking import Booking
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import DelayResult
from ..schemas.user import CurrentUser
from ..utils.time_utils import ensure_utc
from .base import BaseService
from .cache_service import CacheService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class DelayService(BaseService):
    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        cache: Optional[CacheService] = None,
    ):
        super().__init__(db, cache)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.notification_service = notification_service

    def preview_delay(self, cutoff: datetime) -> List[Booking]:
        """Bookings a delay from ``cutoff`` would move, in start order."""
        return self.booking_repository.get_starting_at_or_after(ensure_utc(cutoff))

    @BaseService.measure_operation("apply_delay")
    def apply_delay(
        self,
        actor: CurrentUser,
        delay_minutes: int,
        cutoff: datetime,
        reason: Optional[str] = None,
    ) -> DelayResult:
        """
        Shift every booking with ``start >= cutoff`` by ``delay_minutes``.

        Bookings in every state are moved, cancelled and completed included.

        Raises:
            ForbiddenException: If the actor is not an administrator
            ValidationException: Non-positive or non-integer delay, or a too-short reason
            PersistenceException: If the shift could not be saved; nothing is moved
        """
        if not actor.is_admin:
            raise ForbiddenException("Only administrators can delay bookings")
        self._validate(delay_minutes, reason)

        cutoff = ensure_utc(cutoff)
        delta = timedelta(minutes=delay_minutes)
        attempted: List[str] = []

        try:
            with self.transaction():
                affected = self.booking_repository.get_starting_at_or_after(cutoff)
                attempted = [b.id for b in affected]
                for booking in affected:
                    booking.start = booking.start + delta
                    booking.end = booking.end + delta
                    booking.bump_version()
                self.booking_repository.flush()
        except PersistenceException as e:
            raise PersistenceException(
                f"Delay of {delay_minutes} minutes could not be applied; no booking was moved",
                code="DELAY_FAILED",
                details={"booking_ids": attempted, "cause": e.message},
            ) from e

        self.invalidate_pattern(f"{BOOKINGS_CACHE_PREFIX}:*")
        prometheus_metrics.inc_delayed_bookings(len(affected))
        self.log_operation(
            "apply_delay",
            affected_count=len(affected),
            delay_minutes=delay_minutes,
            cutoff=cutoff.isoformat(),
            admin_id=actor.id,
        )

        notified = 0
        for booking in affected:
            if self._notify(booking, delay_minutes, reason):
                notified += 1

        return DelayResult(
            affected_count=len(affected),
            booking_ids=[b.id for b in affected],
            delay_minutes=delay_minutes,
            cutoff=cutoff,
            notified_count=notified,
        )

    @staticmethod
    def _validate(delay_minutes: int, reason: Optional[str]) -> None:
        if isinstance(delay_minutes, bool) or not isinstance(delay_minutes, int):
            raise ValidationException(
                "Delay must be a whole number of minutes",
                code="INVALID_DELAY",
                details={"delay_minutes": delay_minutes},
            )
        if delay_minutes <= 0:
            raise ValidationException(
                "Delay must be positive",
                code="INVALID_DELAY",
                details={"delay_minutes": delay_minutes},
            )
        if reason is not None and len(reason.strip()) < MIN_DELAY_REASON_LENGTH:
            raise ValidationException(
                f"Delay reason must be at least {MIN_DELAY_REASON_LENGTH} characters",
                code="INVALID_DELAY_REASON",
            )

    def _notify(self, booking: Booking, delay_minutes: int, reason: Optional[str]) -> bool:
        if self.notification_service is None:
            return False
        return self.notification_service.notify_booking(
            booking,
            NotificationType.BOOKING_DELAY,
            {"delay_minutes": delay_minutes, "reason": (reason or "").strip()},
        )
