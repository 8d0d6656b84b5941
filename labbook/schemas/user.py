# labbook/schemas/user.py
from typing import Optional

from pydantic import ConfigDict

from ..core.enums import RoleName
from ._strict_base import StrictModel, StrictRequestModel


class CurrentUser(StrictModel):
    """
    Acting identity passed explicitly into every service operation.

    Immutable so a service can never alter who it is acting for.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, from_attributes=True)

    id: str
    name: str
    email: str = ""
    role: RoleName = RoleName.USER

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN


class UserProfileUpdate(StrictRequestModel):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[RoleName] = None
    department: Optional[str] = None


class EmailPreferences(StrictRequestModel):
    email_notifications: bool = True
    booking_reminders: bool = True
