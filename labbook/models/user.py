# labbook/models/user.py
"""User profiles as seen by the booking core (identity store)."""

from sqlalchemy import Boolean, Column, String
import ulid

from ..core.constants import MAX_NAME_LENGTH
from ..core.enums import RoleName
from ..database import Base
from .base_enum import create_safe_enum
from .types import TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(MAX_NAME_LENGTH), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    role = Column(create_safe_enum(RoleName, "user_role"), nullable=False, default=RoleName.USER)
    department = Column(String(255), nullable=True)

    # Email preferences
    email_notifications = Column(Boolean, nullable=False, default=True)
    booking_reminders = Column(Boolean, nullable=False, default=True)

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN

    def __repr__(self) -> str:
        return f"<User {self.id} {self.name} ({self.role.value})>"
