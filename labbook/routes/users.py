# labbook/routes/users.py
"""Profile and email preference routes for the acting user."""

from fastapi import APIRouter, Depends

from ..api.dependencies import get_current_user, get_identity_service
from ..core.exceptions import DomainException
from ..errors import handle_domain_exception
from ..schemas.user import CurrentUser, EmailPreferences, UserProfileUpdate
from ..services.identity_service import IdentityService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=CurrentUser)
def read_me(current_user: CurrentUser = Depends(get_current_user)):
    return current_user


@router.patch("/me", response_model=CurrentUser)
def update_me(
    profile_data: UserProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
):
    """Edit the caller's own profile. Only administrators may change a role."""
    try:
        if "role" in profile_data.model_fields_set and not current_user.is_admin:
            profile_data = profile_data.model_copy(update={"role": current_user.role})
        identity.update_profile(current_user.id, profile_data)
        return identity.load(current_user.id)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/me/email-preferences", response_model=EmailPreferences)
def get_email_preferences(
    current_user: CurrentUser = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
):
    return identity.get_email_preferences(current_user.id)


@router.put("/me/email-preferences", response_model=EmailPreferences)
def update_email_preferences(
    preferences: EmailPreferences,
    current_user: CurrentUser = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
):
    try:
        identity.update_email_preferences(current_user.id, preferences)
        return identity.get_email_preferences(current_user.id)
    except DomainException as e:
        handle_domain_exception(e)
