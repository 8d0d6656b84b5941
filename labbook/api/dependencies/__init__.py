# labbook/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_user, get_identity_service, require_admin
from .database import get_db
from .services import (
    get_availability_service,
    get_booking_service,
    get_cache_service_dep,
    get_delay_service,
    get_email_sender,
    get_instrument_service,
    get_notification_service,
    get_statistics_service,
)

__all__ = [
    # Auth
    "get_current_user",
    "get_identity_service",
    "require_admin",
    # Database
    "get_db",
    # Services
    "get_availability_service",
    "get_booking_service",
    "get_cache_service_dep",
    "get_delay_service",
    "get_email_sender",
    "get_instrument_service",
    "get_notification_service",
    "get_statistics_service",
]
