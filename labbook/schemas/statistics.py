# labbook/schemas/statistics.py
"""Derived usage statistics. Nothing here is persisted."""

from typing import List

from ._strict_base import StrictModel


class InstrumentUsage(StrictModel):
    instrument_id: str
    instrument_name: str
    booking_count: int
    total_hours: float


class UserBookingStats(StrictModel):
    user_id: str
    user_name: str
    booking_count: int
    total_hours: float


class WeeklyUsage(StrictModel):
    """One bucket: an ISO week key (``2024-W02``) or a weekday label (``Mon``)."""

    week: str
    booking_count: int


class BookingStatistics(StrictModel):
    total_bookings: int
    instrument_usage: List[InstrumentUsage]
    user_bookings: List[UserBookingStats]
    weekly_usage: List[WeeklyUsage]
