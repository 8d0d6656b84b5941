# labbook/services/email_templates.py
"""
Built-in email templates.

Used whenever an administrator has not stored an override in the
``email_templates`` table. Placeholders are Jinja2 expressions; any
variable the caller does not supply renders as an empty string.

Variables available to every booking template: ``user_name``,
``instrument_name``, ``start_date``, ``end_date``, ``time_range``, ``status``,
``purpose``, ``booking_id`` and ``frontend_url``.
"""

from typing import Dict, NamedTuple

from ..core.enums import NotificationType


class DefaultTemplate(NamedTuple):
    subject: str
    html_content: str


_BOOKING_DETAILS = """
<ul>
  <li><strong>Instrument:</strong> {{ instrument_name }}</li>
  <li><strong>Start:</strong> {{ start_date }}</li>
  <li><strong>End:</strong> {{ end_date }}</li>
  <li><strong>Status:</strong> {{ status }}</li>
</ul>
"""

DEFAULT_TEMPLATES: Dict[str, DefaultTemplate] = {
    NotificationType.BOOKING_CONFIRMATION.value: DefaultTemplate(
        subject="Booking Confirmation: {{ instrument_name }}",
        html_content=(
            "<p>Dear {{ user_name }},</p>"
            "<p>Your booking has been received with the following details:</p>"
            + _BOOKING_DETAILS
            + "<p>Thank you for using our lab booking system.</p>"
        ),
    ),
    NotificationType.BOOKING_CONFIRMED.value: DefaultTemplate(
        subject="Booking Approved: {{ instrument_name }}",
        html_content=(
            "<p>Dear {{ user_name }},</p>"
            "<p>Your booking request has been approved.</p>" + _BOOKING_DETAILS
        ),
    ),
    NotificationType.BOOKING_CANCELLED.value: DefaultTemplate(
        subject="Booking Cancelled: {{ instrument_name }}",
        html_content=(
            "<p>Dear {{ user_name }},</p>"
            "<p>Your booking has been cancelled.</p>"
            + _BOOKING_DETAILS
            + "{% if reason %}<p><strong>Reason:</strong> {{ reason }}</p>{% endif %}"
        ),
    ),
    NotificationType.BOOKING_UPDATE.value: DefaultTemplate(
        subject="Booking Update: {{ instrument_name }}",
        html_content=(
            "<p>Dear {{ user_name }},</p>"
            "<p>Your booking has been updated:</p>" + _BOOKING_DETAILS
        ),
    ),
    NotificationType.BOOKING_DELAY.value: DefaultTemplate(
        subject="Schedule Delay: {{ instrument_name }}",
        html_content=(
            "<p>Dear {{ user_name }},</p>"
            "<p>Your booking has been delayed by {{ delay_minutes }} minutes.</p>"
            "<p><strong>New time:</strong> {{ time_range }}</p>"
            + _BOOKING_DETAILS
            + "{% if reason %}<p><strong>Reason:</strong> {{ reason }}</p>{% endif %}"
        ),
    ),
    NotificationType.BOOKING_COMMENT.value: DefaultTemplate(
        subject="New comment on your {{ instrument_name }} booking",
        html_content=(
            "<p>Dear {{ user_name }},</p>"
            "<p>{{ commenter_name }} commented on your booking:</p>"
            "<blockquote>{{ comment }}</blockquote>" + _BOOKING_DETAILS
        ),
    ),
}
