# labbook/repositories/factory.py
"""
Repository Factory for the lab booking core.

Centralizes repository creation so services never construct them by hand.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .comment_repository import CommentRepository
    from .email_template_repository import EmailTemplateRepository
    from .instrument_repository import InstrumentRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_comment_repository(db: Session) -> "CommentRepository":
        from .comment_repository import CommentRepository

        return CommentRepository(db)

    @staticmethod
    def create_instrument_repository(db: Session) -> "InstrumentRepository":
        from .instrument_repository import InstrumentRepository

        return InstrumentRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_email_template_repository(db: Session) -> "EmailTemplateRepository":
        from .email_template_repository import EmailTemplateRepository

        return EmailTemplateRepository(db)
