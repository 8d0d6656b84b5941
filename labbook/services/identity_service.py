# labbook/services/identity_service.py
"""
Identity collaborator.

Resolves who is acting and how to reach a booking's owner. Callers load a
``CurrentUser`` once per request and pass it into every service operation;
nothing in the core reads identity from ambient state.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.constants import UNKNOWN_USER_NAME
from ..core.exceptions import NotFoundException, UnauthorizedException
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.user import CurrentUser, EmailPreferences, UserProfileUpdate
from .base import BaseService

logger = logging.getLogger(__name__)


class IdentityService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    def get_user(self, user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        return self.user_repository.get_by_id(user_id)

    @BaseService.measure_operation("load_identity")
    def load(self, user_id: Optional[str]) -> CurrentUser:
        """
        Load the acting identity.

        Raises:
            UnauthorizedException: If no user id was given or it is unknown
        """
        user = self.get_user(user_id)
        if user is None:
            raise UnauthorizedException(
                "Unknown or missing user identity", details={"user_id": user_id}
            )
        return self._to_current_user(user)

    @BaseService.measure_operation("save_identity")
    def save(self, identity: CurrentUser, department: Optional[str] = None) -> CurrentUser:
        """Create or update the stored profile for ``identity``."""
        with self.transaction():
            user = self.user_repository.get_by_id(identity.id)
            if user is None:
                user = self.user_repository.create(
                    id=identity.id,
                    name=identity.name,
                    email=identity.email or None,
                    role=identity.role,
                    department=department,
                )
            else:
                user.name = identity.name
                user.email = identity.email or None
                user.role = identity.role
                if department is not None:
                    user.department = department
                self.user_repository.flush()

        self.log_operation("save_identity", user_id=user.id)
        return self._to_current_user(user)

    @BaseService.measure_operation("update_profile")
    def update_profile(self, user_id: str, data: UserProfileUpdate) -> User:
        with self.transaction():
            user = self._require_user(user_id)
            for field in data.model_fields_set:
                setattr(user, field, getattr(data, field))
            self.user_repository.flush()
        return user

    @BaseService.measure_operation("update_email_preferences")
    def update_email_preferences(self, user_id: str, prefs: EmailPreferences) -> User:
        with self.transaction():
            user = self._require_user(user_id)
            user.email_notifications = prefs.email_notifications
            user.booking_reminders = prefs.booking_reminders
            self.user_repository.flush()
        return user

    def get_email_preferences(self, user_id: str) -> EmailPreferences:
        user = self.get_user(user_id)
        if user is None:
            return EmailPreferences()
        return EmailPreferences(
            email_notifications=user.email_notifications,
            booking_reminders=user.booking_reminders,
        )

    def resolve_user_name(self, user_id: Optional[str]) -> str:
        user = self.get_user(user_id)
        return user.name if user and user.name else UNKNOWN_USER_NAME

    def resolve_user_email(self, user_id: Optional[str]) -> str:
        user = self.get_user(user_id)
        return user.email if user and user.email else ""

    def _require_user(self, user_id: str) -> User:
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundException(f"User {user_id} not found", code="USER_NOT_FOUND")
        return user

    @staticmethod
    def _to_current_user(user: User) -> CurrentUser:
        return CurrentUser(id=user.id, name=user.name, email=user.email or "", role=user.role)
