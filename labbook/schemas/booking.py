# labbook/schemas/booking.py
"""
Booking schemas for the lab booking core.

Request models only check shapes and types. Business rules (``end`` after
``start``, non-blank purpose, permissions) are enforced by the services so
they surface as domain errors whichever way the core is called.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ..core.enums import ApprovalState, ProgressState
from ..models.booking import Booking
from ._strict_base import StrictModel, StrictRequestModel, StrictResponseModel


class SampleInfo(StrictModel):
    """Sample run parameters recorded in a booking's details."""

    sample_count: int
    time_per_sample_minutes: float
    duration_hours: Optional[float] = None


class BookingCreate(StrictRequestModel):
    """
    Create a booking.

    Either ``end`` is given, or it is derived from ``duration_hours`` or from
    ``sample_count`` x ``time_per_sample_minutes``.
    """

    instrument_id: str = Field(..., description="Instrument to book")
    user_id: Optional[str] = Field(
        None, description="Booking owner; defaults to the acting user (admins may book for others)"
    )
    start: datetime
    end: Optional[datetime] = None
    duration_hours: Optional[float] = Field(None, description="Manual duration when end is omitted")
    sample_count: Optional[int] = None
    time_per_sample_minutes: Optional[float] = None
    purpose: str = ""
    details: Optional[str] = None
    status: Optional[str] = Field(
        None, description="Initial legacy status; defaults by booking flow"
    )


class BookingUpdate(StrictRequestModel):
    """
    Partial edit of a booking. Only fields present in the payload change.

    ``status`` takes the legacy string; ``approval_state``/``progress_state``
    address the two axes directly. Sending both forms is rejected.
    """

    instrument_id: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    duration_hours: Optional[float] = None
    sample_count: Optional[int] = None
    time_per_sample_minutes: Optional[float] = None
    purpose: Optional[str] = None
    details: Optional[str] = None
    status: Optional[str] = None
    approval_state: Optional[ApprovalState] = None
    progress_state: Optional[ProgressState] = None
    expected_version: Optional[int] = Field(
        None, ge=1, description="Version the client last read; required in strict mode"
    )


class ProgressUpdate(StrictRequestModel):
    progress_state: ProgressState


class CancelRequest(StrictRequestModel):
    reason: Optional[str] = None


class CommentCreate(StrictRequestModel):
    content: str


class CommentResponse(StrictResponseModel):
    id: str
    booking_id: str
    user_id: str
    user_name: str
    content: str
    created_at: datetime


class BookingResponse(StrictResponseModel):
    id: str
    instrument_id: str
    instrument_name: str
    user_id: str
    user_name: str
    start: datetime
    end: datetime
    purpose: str
    details: Optional[str] = None
    status: str
    approval_state: ApprovalState
    progress_state: ProgressState
    version: int
    created_at: datetime
    updated_at: datetime
    sample_info: Optional[SampleInfo] = None
    comments: List[CommentResponse] = Field(default_factory=list)

    @classmethod
    def from_booking(cls, booking: Booking, *, include_comments: bool = True) -> "BookingResponse":
        from ..services.duration_service import parse_sample_details

        return cls(
            id=booking.id,
            instrument_id=booking.instrument_id,
            instrument_name=booking.instrument_name,
            user_id=booking.user_id,
            user_name=booking.user_name,
            start=booking.start,
            end=booking.end,
            purpose=booking.purpose,
            details=booking.details,
            status=booking.status.value,
            approval_state=booking.approval_state,
            progress_state=booking.progress_state,
            version=booking.version,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            sample_info=parse_sample_details(booking.details),
            comments=(
                [CommentResponse.model_validate(c) for c in booking.comments]
                if include_comments
                else []
            ),
        )


class BookedInterval(StrictModel):
    booking_id: str
    start: datetime
    end: datetime
    status: str


class DelayRequest(StrictRequestModel):
    delay_minutes: int
    cutoff: datetime
    reason: Optional[str] = None

    @field_validator("delay_minutes", mode="before")
    @classmethod
    def _reject_bool(cls, value: object) -> object:
        if isinstance(value, bool):
            raise ValueError("delay_minutes must be an integer")
        return value


class DelayResult(StrictModel):
    affected_count: int
    booking_ids: List[str]
    delay_minutes: int
    cutoff: datetime
    notified_count: int = 0


class DeleteCompletedResponse(StrictModel):
    deleted_count: int
