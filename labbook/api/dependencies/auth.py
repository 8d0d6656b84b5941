# labbook/api/dependencies/auth.py
"""
Identity dependencies.

Authentication happens upstream; requests arrive with the caller's user id
in the ``X-User-Id`` header and it is resolved to a ``CurrentUser`` here.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from ...core.exceptions import UnauthorizedException
from ...schemas.user import CurrentUser
from ...services.identity_service import IdentityService
from .database import get_db

logger = logging.getLogger(__name__)


def get_identity_service(db: Session = Depends(get_db)) -> IdentityService:
    return IdentityService(db)


def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    identity: IdentityService = Depends(get_identity_service),
) -> CurrentUser:
    """Resolve the acting user, or answer 401."""
    try:
        return identity.load(x_user_id)
    except UnauthorizedException as e:
        logger.info(f"Rejected request with unknown identity {x_user_id!r}")
        raise e.to_http_exception()


def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return current_user
