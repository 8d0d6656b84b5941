# labbook/core/exceptions.py
"""
Domain-specific exceptions for the lab booking core.

Services raise these instead of display strings. The API layer turns
them into HTTP responses through ``to_http_exception``.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when input fails business validation."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested booking, instrument, comment or user is missing."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when a write collides with existing data."""

    status_code = status.HTTP_409_CONFLICT


class UnauthorizedException(DomainException):
    """Raised when the acting identity cannot be resolved."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class PersistenceException(DomainException):
    """Raised when the backing store rejects or fails a write."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when exclusive scheduling is on and a booking overlaps another."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        conflicting_ids: Optional[List[str]] = None,
    ):
        super().__init__(
            message=message or "This time slot conflicts with an existing booking",
            code="BOOKING_CONFLICT",
            details={"conflicting_booking_ids": conflicting_ids or []},
        )


class StaleBookingException(ConflictException):
    """Raised when an update carries a version older than the stored one."""

    def __init__(self, booking_id: str, expected_version: Optional[int], current_version: int):
        super().__init__(
            message="Booking was modified by someone else; reload and retry",
            code="STALE_BOOKING",
            details={
                "booking_id": booking_id,
                "expected_version": expected_version,
                "current_version": current_version,
            },
        )


class NotificationFailure(DomainException):
    """
    Raised by senders when an email cannot be delivered.

    Never escapes a service operation: the notification layer logs it and
    reports ``False`` to the caller.
    """


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as connection issues,
    query failures, or constraint violations. Services translate it into
    ``PersistenceException``.
    """
