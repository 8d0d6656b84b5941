# labbook/models/comment.py
"""Comments attached to a booking. Owned by the booking and never edited."""

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.constants import MAX_NAME_LENGTH
from ..database import Base
from .types import UTCDateTime, utc_now


class Comment(Base):
    __tablename__ = "booking_comments"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    booking_id = Column(
        String(26),
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String(26), nullable=False)
    user_name = Column(String(MAX_NAME_LENGTH), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(UTCDateTime(), default=utc_now, nullable=False)

    booking = relationship("Booking", back_populates="comments")

    def __repr__(self) -> str:
        return f"<Comment {self.id} on {self.booking_id} by {self.user_name}>"
