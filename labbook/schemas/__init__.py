"""Pydantic schemas for requests, responses and service value objects."""

from .booking import (
    BookedInterval,
    BookingCreate,
    BookingResponse,
    BookingUpdate,
    CancelRequest,
    CommentCreate,
    CommentResponse,
    DelayRequest,
    DelayResult,
    DeleteCompletedResponse,
    ProgressUpdate,
    SampleInfo,
)
from .instrument import (
    InstrumentCreate,
    InstrumentResponse,
    InstrumentStatusUpdate,
    InstrumentUpdate,
    MaintenanceRecordCreate,
    MaintenanceRecordResponse,
)
from .statistics import BookingStatistics, InstrumentUsage, UserBookingStats, WeeklyUsage
from .user import CurrentUser, EmailPreferences, UserProfileUpdate

__all__ = [
    "BookedInterval",
    "BookingCreate",
    "BookingResponse",
    "BookingStatistics",
    "BookingUpdate",
    "CancelRequest",
    "CommentCreate",
    "CommentResponse",
    "CurrentUser",
    "DelayRequest",
    "DelayResult",
    "DeleteCompletedResponse",
    "EmailPreferences",
    "InstrumentCreate",
    "InstrumentResponse",
    "InstrumentStatusUpdate",
    "InstrumentUpdate",
    "InstrumentUsage",
    "MaintenanceRecordCreate",
    "MaintenanceRecordResponse",
    "ProgressUpdate",
    "SampleInfo",
    "UserBookingStats",
    "UserProfileUpdate",
    "WeeklyUsage",
]
