# labbook/routes/bookings.py
"""
Booking routes.

Router Endpoints:
    GET / - All bookings (cached), optionally filtered by owner or instrument
    GET /upcoming - Next confirmed bookings for the dashboard
    GET /current - Bookings running now
    POST / - Create a booking (quick or full request flow)
    DELETE /completed - Purge completed bookings (admin)
    GET /{booking_id} - Booking details
    PATCH /{booking_id} - Partial edit
    POST /{booking_id}/approve - Approve a pending request (admin)
    POST /{booking_id}/deny - Deny a pending request (admin)
    POST /{booking_id}/cancel - Cancel
    POST /{booking_id}/progress - Move along the progress axis
    DELETE /{booking_id} - Delete (admin)
    GET /{booking_id}/comments - Comments, oldest first
    POST /{booking_id}/comments - Add a comment
    DELETE /{booking_id}/comments/{comment_id} - Remove a comment
"""

from datetime import datetime, timezone
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from ..api.dependencies import get_booking_service, get_current_user
from ..core.exceptions import DomainException
from ..errors import handle_domain_exception
from ..schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingUpdate,
    CancelRequest,
    CommentCreate,
    CommentResponse,
    DeleteCompletedResponse,
    ProgressUpdate,
)
from ..schemas.user import CurrentUser
from ..services.booking_service import BookingService
from ..services.duration_service import DurationFlow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


# 1. First: all specific routes


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    user_id: Optional[str] = Query(None),
    instrument_id: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        return booking_service.list_bookings(user_id=user_id, instrument_id=instrument_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/upcoming", response_model=List[BookingResponse])
def get_upcoming_bookings(
    limit: int = Query(5, ge=1, le=50),
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Get upcoming bookings for dashboard widget."""
    try:
        bookings = booking_service.get_upcoming_bookings(
            current_user, datetime.now(timezone.utc), limit=limit
        )
        return [BookingResponse.from_booking(b, include_comments=False) for b in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/current", response_model=List[BookingResponse])
def get_current_bookings(
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        bookings = booking_service.get_current_bookings(current_user, datetime.now(timezone.utc))
        return [BookingResponse.from_booking(b, include_comments=False) for b in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    booking_data: BookingCreate,
    flow: DurationFlow = Query(DurationFlow.QUICK),
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    """
    Create a booking.

    ``flow=quick`` books straight away as confirmed; ``flow=edit`` submits a
    pending request and adds the setup overhead to sample-derived durations.
    """
    try:
        booking = booking_service.create_booking(current_user, booking_data, flow=flow)
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/completed", response_model=DeleteCompletedResponse)
def delete_completed_bookings(
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        deleted = booking_service.delete_completed_bookings(current_user)
        return DeleteCompletedResponse(deleted_count=deleted)
    except DomainException as e:
        handle_domain_exception(e)


# 2. Then: routes keyed by booking id


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        return BookingResponse.from_booking(booking_service.get_booking(booking_id))
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{booking_id}", response_model=BookingResponse)
def update_booking(
    booking_id: str,
    update_data: BookingUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        booking = booking_service.update_booking(current_user, booking_id, update_data)
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/approve", response_model=BookingResponse)
def approve_booking(
    booking_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        return BookingResponse.from_booking(
            booking_service.approve_booking(current_user, booking_id)
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/deny", response_model=BookingResponse)
def deny_booking(
    booking_id: str,
    deny_data: Optional[CancelRequest] = Body(None),
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        booking = booking_service.deny_booking(
            current_user, booking_id, reason=deny_data.reason if deny_data else None
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    cancel_data: Optional[CancelRequest] = Body(None),
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Cancel a booking."""
    try:
        booking = booking_service.cancel_booking(
            current_user, booking_id, reason=cancel_data.reason if cancel_data else None
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/progress", response_model=BookingResponse)
def set_booking_progress(
    booking_id: str,
    progress_data: ProgressUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        booking = booking_service.set_progress(
            current_user, booking_id, progress_data.progress_state
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        booking_service.delete_booking(current_user, booking_id)
    except DomainException as e:
        handle_domain_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{booking_id}/comments", response_model=List[CommentResponse])
def list_comments(
    booking_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        return booking_service.get_comments(booking_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    booking_id: str,
    comment_data: CommentCreate,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        return booking_service.add_comment(current_user, booking_id, comment_data.content)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{booking_id}/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    booking_id: str,
    comment_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        booking_service.delete_comment(current_user, booking_id, comment_id)
    except DomainException as e:
        handle_domain_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
