from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for the identity store."""

    def __init__(self, db: Session):
        super().__init__(db, User)
