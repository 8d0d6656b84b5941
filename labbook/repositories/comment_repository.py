# labbook/repositories/comment_repository.py
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.comment import Comment
from .base_repository import BaseRepository


class CommentRepository(BaseRepository[Comment]):
    """Repository for booking comments."""

    def __init__(self, db: Session):
        super().__init__(db, Comment)

    def list_for_booking(self, booking_id: str) -> List[Comment]:
        query = (
            self.db.query(Comment)
            .filter(Comment.booking_id == booking_id)
            .order_by(Comment.created_at, Comment.id)
        )
        return self._execute_query(query)

    def get_for_booking(self, booking_id: str, comment_id: str) -> Optional[Comment]:
        return self.find_one_by(id=comment_id, booking_id=booking_id)
