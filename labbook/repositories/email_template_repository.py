# labbook/repositories/email_template_repository.py
from typing import Optional

from sqlalchemy.orm import Session

from ..models.email_template import EmailTemplate
from .base_repository import BaseRepository


class EmailTemplateRepository(BaseRepository[EmailTemplate]):
    def __init__(self, db: Session):
        super().__init__(db, EmailTemplate)

    def get_by_type(self, template_type: str) -> Optional[EmailTemplate]:
        return self.find_one_by(template_type=template_type)
