# labbook/routes/statistics.py
"""Usage statistics routes."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..api.dependencies import get_current_user, get_statistics_service
from ..core.exceptions import DomainException
from ..errors import handle_domain_exception
from ..schemas.statistics import BookingStatistics, WeeklyUsage
from ..schemas.user import CurrentUser
from ..services.statistics_service import StatisticsService

router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.get("", response_model=BookingStatistics)
def get_statistics(
    instrument_id: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    statistics_service: StatisticsService = Depends(get_statistics_service),
):
    try:
        return statistics_service.get_statistics(instrument_id=instrument_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/trailing-week", response_model=List[WeeklyUsage])
def get_trailing_week(
    day: date = Query(..., description="Last local day of the seven-day window"),
    current_user: CurrentUser = Depends(get_current_user),
    statistics_service: StatisticsService = Depends(get_statistics_service),
):
    try:
        return statistics_service.get_trailing_week(day)
    except DomainException as e:
        handle_domain_exception(e)
