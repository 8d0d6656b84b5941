# labbook/models/email_template.py
"""Administrator-editable email templates, one row per notification type."""

from sqlalchemy import Column, String, Text
import ulid

from ..database import Base
from .types import TimestampMixin


class EmailTemplate(Base, TimestampMixin):
    __tablename__ = "email_templates"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    template_type = Column(String(64), nullable=False, unique=True, index=True)
    subject = Column(String(255), nullable=False)
    html_content = Column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<EmailTemplate {self.template_type}>"
