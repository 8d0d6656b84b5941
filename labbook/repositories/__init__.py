"""
Repository layer for the lab booking core.

Usage:
    from labbook.repositories import RepositoryFactory

    repository = RepositoryFactory.create_booking_repository(db)
    bookings = repository.get_starting_at_or_after(cutoff)
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .comment_repository import CommentRepository
from .email_template_repository import EmailTemplateRepository
from .factory import RepositoryFactory
from .instrument_repository import InstrumentRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "CommentRepository",
    "EmailTemplateRepository",
    "InstrumentRepository",
    "RepositoryFactory",
    "UserRepository",
]
