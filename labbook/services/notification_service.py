# labbook/services/notification_service.py
"""
Notification Service for the lab booking core.

Renders an email template with Jinja2 and hands it to the configured
sender. Notifications are best-effort: ``notify`` never raises, it logs
and returns ``False``, so a failed email can never undo or fail the
booking write that triggered it.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from jinja2 import Environment, TemplateError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import NotificationType
from ..core.exceptions import NotificationFailure
from ..models.booking import Booking
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..utils.time_utils import ensure_utc, format_range
from .base import BaseService
from .email import EmailSender, build_email_sender
from .email_templates import DEFAULT_TEMPLATES
from .identity_service import IdentityService

logger = logging.getLogger(__name__)


class NotificationService(BaseService):
    """Booking notifications over email."""

    def __init__(
        self,
        db: Session,
        email_sender: Optional[EmailSender] = None,
        identity_service: Optional[IdentityService] = None,
    ):
        super().__init__(db)
        self.template_repository = RepositoryFactory.create_email_template_repository(db)
        self.identity = identity_service or IdentityService(db)
        self.email_sender = email_sender if email_sender is not None else build_email_sender()
        self.env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
        self.env.filters["format_datetime"] = _format_datetime

    def render(
        self, template_type: str, variables: Mapping[str, Any]
    ) -> Optional[Dict[str, str]]:
        """
        Render subject and body for ``template_type``.

        A stored template overrides the built-in default. Returns None for an
        unknown template type.
        """
        stored = self.template_repository.get_by_type(template_type)
        if stored is not None:
            subject_src, body_src = stored.subject, stored.html_content
        elif template_type in DEFAULT_TEMPLATES:
            subject_src, body_src = DEFAULT_TEMPLATES[template_type]
        else:
            return None

        context = {"frontend_url": settings.frontend_url, **variables}
        return {
            "subject": self.env.from_string(subject_src).render(**context).strip(),
            "html": self.env.from_string(body_src).render(**context),
        }

    @BaseService.measure_operation("notify")
    def notify(self, to: str, template_type: str, variables: Mapping[str, Any]) -> bool:
        """
        Send one templated email.

        Returns:
            True when the sender accepted the message, False otherwise
        """
        template_key = getattr(template_type, "value", template_type)

        if not settings.email_enabled:
            prometheus_metrics.record_notification(template_key, "skipped")
            return False
        if not to:
            self.logger.info(f"Skipping {template_key} notification: no recipient address")
            prometheus_metrics.record_notification(template_key, "skipped")
            return False

        try:
            rendered = self.render(template_key, variables)
            if rendered is None:
                self.logger.error(f"Unknown email template type: {template_key}")
                prometheus_metrics.record_notification(template_key, "failed")
                return False

            self.email_sender.send_email(to, rendered["subject"], rendered["html"])
        except (NotificationFailure, TemplateError) as e:
            self.logger.error(f"Failed to send {template_key} notification to {to}: {e}")
            prometheus_metrics.record_notification(template_key, "failed")
            return False
        except Exception as e:
            self.logger.error(
                f"Unexpected error sending {template_key} notification to {to}: {e}",
                exc_info=True,
            )
            prometheus_metrics.record_notification(template_key, "failed")
            return False

        prometheus_metrics.record_notification(template_key, "sent")
        return True

    def notify_user(
        self, user_id: str, template_type: str, variables: Mapping[str, Any]
    ) -> bool:
        """Notify a user by id, honouring their email preference."""
        try:
            user = self.identity.get_user(user_id)
        except Exception as e:
            self.logger.error(f"Could not resolve recipient {user_id}: {e}")
            return False

        if user is None or not user.email:
            self.logger.info(f"No email address on file for user {user_id}")
            return False
        if not user.email_notifications:
            self.logger.debug(f"User {user_id} has email notifications turned off")
            prometheus_metrics.record_notification(
                getattr(template_type, "value", template_type), "skipped"
            )
            return False

        return self.notify(user.email, template_type, {"user_name": user.name, **variables})

    def notify_booking(
        self,
        booking: Booking,
        template_type: NotificationType,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """Notify a booking's owner with the standard booking variables."""
        variables = booking_variables(booking)
        if extra:
            variables.update(extra)
        return self.notify_user(booking.user_id, template_type.value, variables)


def booking_variables(booking: Booking) -> Dict[str, Any]:
    tz = settings.tz
    return {
        "booking_id": booking.id,
        "user_name": booking.user_name,
        "instrument_name": booking.instrument_name,
        "start_date": _format_datetime(booking.start, tz=tz),
        "end_date": _format_datetime(booking.end, tz=tz),
        "time_range": format_range(booking.start, booking.end, tz),
        "status": booking.status.value,
        "purpose": booking.purpose,
    }


def _format_datetime(value: Any, fmt: str = "%b %d, %Y %H:%M", tz=None) -> str:
    if not hasattr(value, "strftime"):
        return "" if value is None else str(value)
    value = ensure_utc(value)
    if tz is not None:
        value = value.astimezone(tz)
    return value.strftime(fmt)
