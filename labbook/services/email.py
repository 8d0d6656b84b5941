# labbook/services/email.py
"""
Email senders.

``EmailService`` delivers through the Resend API. ``ConsoleEmailService``
only logs and is used when no API key is configured (local development and
tests). Both expose ``send_email(to_email, subject, html_content)`` and
raise ``NotificationFailure`` when delivery fails.
"""

import logging
import re
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

import resend
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotificationFailure
from .base import BaseService

if TYPE_CHECKING:
    from .cache_service import CacheService

logger = logging.getLogger(__name__)


def html_to_text(html_content: str) -> str:
    """Plain-text alternative for an HTML body."""
    text = re.sub(r"<[^>]+>", " ", html_content)
    return re.sub(r"\s+", " ", text).strip()


class EmailService(BaseService):
    """Service for sending emails using Resend API."""

    def __init__(self, db: Optional[Session] = None, cache: Optional["CacheService"] = None):
        super().__init__(db, cache)  # type: ignore[arg-type]

        api_key = settings.resend_api_key.get_secret_value() if settings.resend_api_key else ""
        if not api_key:
            raise NotificationFailure("Resend API key not configured", code="EMAIL_NOT_CONFIGURED")

        resend.api_key = api_key
        self.from_email = settings.from_email

    @BaseService.measure_operation("send_email")
    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send one email.

        Raises:
            NotificationFailure: If the provider rejects the message
        """
        email_data = {
            "from": self.from_email,
            "to": to_email,
            "subject": subject,
            "html": html_content,
            "text": text_content or html_to_text(html_content),
        }
        try:
            response = resend.Emails.send(email_data)
        except Exception as e:
            self.logger.error(f"Failed to send email to {to_email}: {type(e).__name__}: {e}")
            raise NotificationFailure(
                f"Failed to send email: {str(e)}",
                code="EMAIL_SEND_FAILED",
                details={"to": to_email, "subject": subject},
            ) from e

        self.log_operation("email_sent", to_email=to_email, subject=subject)
        return dict(response) if response else {}


class ConsoleEmailService:
    """Logs emails instead of sending them; keeps a short in-memory outbox."""

    def __init__(self, *_: Any, **__: Any) -> None:
        self.outbox: List[Dict[str, str]] = []

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        self.outbox.append({"to": to_email, "subject": subject, "html": html_content})
        del self.outbox[:-100]
        logger.info(f"[console email] to={to_email} subject={subject}")
        return {"id": f"console-{len(self.outbox)}"}


EmailSender = Union[EmailService, ConsoleEmailService]


def build_email_sender() -> EmailSender:
    """Pick the sender for the configured provider."""
    if settings.email_provider == "resend":
        return EmailService()
    return ConsoleEmailService()
