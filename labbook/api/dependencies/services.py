# labbook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.cache_service import CacheService
from ...services.delay_service import DelayService
from ...services.email import EmailSender, build_email_sender
from ...services.identity_service import IdentityService
from ...services.instrument_service import InstrumentService
from ...services.notification_service import NotificationService
from ...services.statistics_service import StatisticsService
from .auth import get_identity_service
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_cache_service_singleton() -> CacheService:
    """Get singleton cache service instance."""
    return CacheService.from_settings()


def get_cache_service_dep() -> CacheService:
    """Get cache service instance for dependency injection."""
    return get_cache_service_singleton()


@lru_cache(maxsize=1)
def get_email_sender_singleton() -> EmailSender:
    """Process-wide email sender for the configured provider."""
    return build_email_sender()


def get_email_sender() -> EmailSender:
    return get_email_sender_singleton()


def get_notification_service(
    db: Session = Depends(get_db),
    email_sender: EmailSender = Depends(get_email_sender),
    identity: IdentityService = Depends(get_identity_service),
) -> NotificationService:
    return NotificationService(db, email_sender=email_sender, identity_service=identity)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
    cache: CacheService = Depends(get_cache_service_dep),
    availability_service: AvailabilityService = Depends(get_availability_service),
    identity: IdentityService = Depends(get_identity_service),
) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session
        notification_service: Sends booking emails after each write
        cache: Shared read cache

    Returns:
        BookingService instance
    """
    return BookingService(
        db,
        notification_service=notification_service,
        cache=cache,
        availability_service=availability_service,
        identity_service=identity,
    )


def get_delay_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
    cache: CacheService = Depends(get_cache_service_dep),
) -> DelayService:
    return DelayService(db, notification_service=notification_service, cache=cache)


def get_statistics_service(db: Session = Depends(get_db)) -> StatisticsService:
    return StatisticsService(db)


def get_instrument_service(db: Session = Depends(get_db)) -> InstrumentService:
    return InstrumentService(db)
