# labbook/models/booking.py
"""
Booking model for the lab booking core.

A booking reserves one instrument for one user over a half-open interval
``[start, end)``. Instrument and user names are snapshotted at write time
so history stays readable after an instrument is renamed or retired, and
``instrument_id`` is deliberately not a foreign key: bookings outlive the
roster entry they were made against.

State lives on two axes (``approval_state`` and ``progress_state``); the
single legacy status string is computed from them.
"""

from datetime import datetime
import logging
from typing import Optional, Tuple

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.constants import MAX_NAME_LENGTH, MAX_PURPOSE_LENGTH
from ..core.enums import ApprovalState, BookingStatus, ProgressState
from ..core.exceptions import ValidationException
from ..database import Base
from .base_enum import create_safe_enum
from .types import TimestampMixin, UTCDateTime

logger = logging.getLogger(__name__)

_PROGRESS_TO_LEGACY = {
    ProgressState.IN_PROGRESS: BookingStatus.IN_PROGRESS,
    ProgressState.COMPLETED: BookingStatus.COMPLETED,
    ProgressState.DELAYED: BookingStatus.DELAYED,
}

_LEGACY_TO_PROGRESS = {
    BookingStatus.NOT_STARTED: ProgressState.NOT_STARTED,
    BookingStatus.IN_PROGRESS: ProgressState.IN_PROGRESS,
    BookingStatus.COMPLETED: ProgressState.COMPLETED,
    BookingStatus.DELAYED: ProgressState.DELAYED,
}


def to_legacy_status(approval: ApprovalState, progress: ProgressState) -> BookingStatus:
    """
    Collapse the two state axes into the legacy status string.

    The mapping is lossy: an approved booking that has not started reads
    as ``confirmed``, never ``Not-Started``.
    """
    if progress == ProgressState.CANCELLED or approval == ApprovalState.DENIED:
        return BookingStatus.CANCELLED
    if approval == ApprovalState.PENDING:
        return BookingStatus.PENDING
    if progress == ProgressState.NOT_STARTED:
        return BookingStatus.CONFIRMED
    return _PROGRESS_TO_LEGACY[progress]


def parse_legacy_status(value: str) -> BookingStatus:
    """Parse a legacy status string, tolerating case and ``_``/``-`` spelling."""
    if isinstance(value, BookingStatus):
        return value
    normalized = str(value).strip().lower().replace("_", "-")
    for status in BookingStatus:
        if status.value.lower() == normalized:
            return status
    raise ValidationException(
        f"Unknown booking status: {value}",
        code="INVALID_STATUS",
        details={"status": value, "allowed": [s.value for s in BookingStatus]},
    )


def from_legacy_status(
    value: str, current_approval: Optional[ApprovalState] = None
) -> Tuple[ApprovalState, ProgressState]:
    """
    Expand a legacy status string into ``(approval, progress)``.

    ``current_approval`` decides how ``cancelled`` is recorded: cancelling
    a request that was still pending reads as a denial.
    """
    status = parse_legacy_status(value)

    if status == BookingStatus.PENDING:
        return ApprovalState.PENDING, ProgressState.NOT_STARTED
    if status == BookingStatus.CONFIRMED:
        return ApprovalState.APPROVED, ProgressState.NOT_STARTED
    if status == BookingStatus.CANCELLED:
        if current_approval == ApprovalState.PENDING:
            return ApprovalState.DENIED, ProgressState.CANCELLED
        return current_approval or ApprovalState.APPROVED, ProgressState.CANCELLED
    return ApprovalState.APPROVED, _LEGACY_TO_PROGRESS[status]


class Booking(Base, TimestampMixin):
    """A reservation of one instrument by one user."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    instrument_id = Column(String(26), nullable=False, index=True)
    instrument_name = Column(String(MAX_NAME_LENGTH), nullable=False)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    user_name = Column(String(MAX_NAME_LENGTH), nullable=False)

    start = Column(UTCDateTime(), nullable=False)
    end = Column(UTCDateTime(), nullable=False)

    purpose = Column(String(MAX_PURPOSE_LENGTH), nullable=False)
    details = Column(Text, nullable=True)

    approval_state = Column(
        create_safe_enum(ApprovalState, "booking_approval_state"),
        nullable=False,
        default=ApprovalState.PENDING,
    )
    progress_state = Column(
        create_safe_enum(ProgressState, "booking_progress_state"),
        nullable=False,
        default=ProgressState.NOT_STARTED,
    )

    version = Column(Integer, nullable=False, default=1)

    comments = relationship(
        "Comment",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="Comment.created_at",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint('"end" > start', name="check_booking_end_after_start"),
        CheckConstraint("version >= 1", name="check_booking_version_positive"),
        Index("ix_bookings_instrument_start", "instrument_id", "start"),
    )

    @property
    def status(self) -> BookingStatus:
        return to_legacy_status(self.approval_state, self.progress_state)

    @property
    def is_cancelled(self) -> bool:
        return (
            self.progress_state == ProgressState.CANCELLED
            or self.approval_state == ApprovalState.DENIED
        )

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600

    def is_active_at(self, moment: datetime) -> bool:
        """True when ``moment`` falls inside ``[start, end]``."""
        return self.start <= moment <= self.end

    def apply_states(self, approval: ApprovalState, progress: ProgressState) -> None:
        self.approval_state = approval
        self.progress_state = progress

    def bump_version(self) -> None:
        self.version = (self.version or 0) + 1

    def snapshot(self) -> dict:
        """Fields whose change counts as a meaningful update (comments excluded)."""
        return {
            "status": self.status,
            "start": self.start,
            "end": self.end,
            "purpose": self.purpose,
            "details": self.details,
            "instrument_id": self.instrument_id,
        }

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id} {self.instrument_name} {self.start}-{self.end} "
            f"{self.status.value}>"
        )
