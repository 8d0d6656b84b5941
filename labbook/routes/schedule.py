# labbook/routes/schedule.py
"""
Scheduling routes: booked intervals, calendar views and bulk delays.

Router Endpoints:
    GET /instruments/{instrument_id}/booked - Taken intervals on a local day
    GET /calendar - Bookings in a day, week or month view
    GET /delay/preview - Bookings a delay from a cutoff would move (admin)
    POST /delay - Push back every booking from a cutoff (admin)
"""

from datetime import date, datetime
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..api.dependencies import (
    get_availability_service,
    get_current_user,
    get_delay_service,
    require_admin,
)
from ..core.enums import CalendarView
from ..core.exceptions import DomainException
from ..errors import handle_domain_exception
from ..schemas.booking import BookedInterval, BookingResponse, DelayRequest, DelayResult
from ..schemas.user import CurrentUser
from ..services.availability_service import AvailabilityService
from ..services.delay_service import DelayService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedule", tags=["schedule"])


@router.get("/instruments/{instrument_id}/booked", response_model=List[BookedInterval])
def get_booked_intervals(
    instrument_id: str,
    day: date = Query(..., description="Local calendar day (YYYY-MM-DD)"),
    current_user: CurrentUser = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
):
    try:
        return availability_service.get_booked_intervals(instrument_id, day)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/calendar", response_model=List[BookingResponse])
def get_calendar(
    view: CalendarView = Query(CalendarView.WEEK),
    anchor: date = Query(..., description="Any day inside the requested view"),
    instrument_id: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
):
    try:
        bookings = availability_service.get_calendar_bookings(view, anchor, instrument_id)
        return [BookingResponse.from_booking(b, include_comments=False) for b in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/delay/preview", response_model=List[BookingResponse])
def preview_delay(
    cutoff: datetime = Query(...),
    current_user: CurrentUser = Depends(require_admin),
    delay_service: DelayService = Depends(get_delay_service),
):
    try:
        bookings = delay_service.preview_delay(cutoff)
        return [BookingResponse.from_booking(b, include_comments=False) for b in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/delay", response_model=DelayResult)
def apply_delay(
    delay_data: DelayRequest,
    current_user: CurrentUser = Depends(get_current_user),
    delay_service: DelayService = Depends(get_delay_service),
):
    try:
        return delay_service.apply_delay(
            current_user,
            delay_data.delay_minutes,
            delay_data.cutoff,
            reason=delay_data.reason,
        )
    except DomainException as e:
        handle_domain_exception(e)
