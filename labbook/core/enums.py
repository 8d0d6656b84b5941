# labbook/core/enums.py
"""
Core enums for the lab booking core.

Booking state is split across two axes: whether an administrator has
accepted the request (approval) and how far the session itself has got
(progress). The single legacy status string is derived from both.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles understood by the permission checks."""

    ADMIN = "admin"
    USER = "user"


class ApprovalState(str, Enum):
    """Administrative decision on a booking request."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class ProgressState(str, Enum):
    """Execution state of the booked session."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELAYED = "delayed"
    CANCELLED = "cancelled"


class BookingStatus(str, Enum):
    """Legacy single-string status exposed to existing clients."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    NOT_STARTED = "Not-Started"
    IN_PROGRESS = "In-Progress"
    COMPLETED = "Completed"
    DELAYED = "Delayed"


class InstrumentStatus(str, Enum):
    """Operational status set by administrators."""

    AVAILABLE = "available"
    MAINTENANCE = "maintenance"
    IN_USE = "in_use"
    OFFLINE = "offline"


class NotificationType(str, Enum):
    """Email template types sent by the booking core."""

    BOOKING_CONFIRMATION = "booking_confirmation"
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_CANCELLED = "booking_cancelled"
    BOOKING_UPDATE = "booking_update"
    BOOKING_DELAY = "booking_delay"
    BOOKING_COMMENT = "booking_comment"


class CalendarView(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
