# tests/services/test_notification_service.py
"""Notification rendering and delivery."""

import pytest

from labbook.core.config import settings
from labbook.core.enums import NotificationType
from labbook.models.email_template import EmailTemplate
from labbook.models.user import User
from labbook.services.notification_service import NotificationService, booking_variables
from tests.helpers.booking_helpers import make_booking, utc


@pytest.fixture
def booking(db, instrument, regular_user):
    return make_booking(
        db,
        instrument,
        regular_user,
        utc(2024, 1, 10, 9, 0),
        utc(2024, 1, 10, 10, 30),
        purpose="Fluorescence imaging",
    )


class TestRender:
    def test_default_template(self, notification_service):
        rendered = notification_service.render(
            "booking_confirmation",
            {"user_name": "Rosalind", "instrument_name": "Confocal Microscope"},
        )
        assert rendered["subject"] == "Booking Confirmation: Confocal Microscope"
        assert "Dear Rosalind," in rendered["html"]

    def test_missing_variables_render_empty(self, notification_service):
        rendered = notification_service.render("booking_update", {})
        assert rendered["subject"] == "Booking Update:"

    def test_stored_template_overrides_default(self, notification_service, db):
        db.add(
            EmailTemplate(
                template_type="booking_update",
                subject="[Lab] {{ instrument_name }} changed",
                html_content="<p>Hi {{ user_name }}, see {{ frontend_url }}</p>",
            )
        )
        db.commit()

        rendered = notification_service.render(
            "booking_update", {"user_name": "Otto", "instrument_name": "Sequencer"}
        )

        assert rendered["subject"] == "[Lab] Sequencer changed"
        assert settings.frontend_url in rendered["html"]

    def test_unknown_type(self, notification_service):
        assert notification_service.render("booking_reminder", {}) is None

    def test_values_are_html_escaped(self, notification_service):
        rendered = notification_service.render(
            "booking_comment",
            {"commenter_name": "Ada", "comment": "<script>alert(1)</script>"},
        )
        assert "<script>" not in rendered["html"]
        assert "&lt;script&gt;" in rendered["html"]


class TestNotify:
    def test_sends_rendered_email(self, notification_service, email_sender):
        sent = notification_service.notify(
            "rosalind@lab.example", "booking_cancelled", {"instrument_name": "HPLC"}
        )
        assert sent is True
        assert len(email_sender.sent) == 1
        assert email_sender.sent[0]["to"] == "rosalind@lab.example"
        assert email_sender.sent[0]["subject"] == "Booking Cancelled: HPLC"

    def test_sender_failure_returns_false(self, notification_service, email_sender):
        email_sender.fail = True
        assert notification_service.notify("a@lab.example", "booking_update", {}) is False

    def test_unexpected_sender_error_returns_false(self, notification_service, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("socket closed")

        monkeypatch.setattr(notification_service.email_sender, "send_email", explode)
        assert notification_service.notify("a@lab.example", "booking_update", {}) is False

    def test_no_recipient(self, notification_service, email_sender):
        assert notification_service.notify("", "booking_update", {}) is False
        assert email_sender.sent == []

    def test_disabled_email(self, notification_service, email_sender, monkeypatch):
        monkeypatch.setattr(settings, "email_enabled", False)
        assert notification_service.notify("a@lab.example", "booking_update", {}) is False
        assert email_sender.sent == []

    def test_unknown_template(self, notification_service, email_sender):
        assert notification_service.notify("a@lab.example", "weekly_digest", {}) is False
        assert email_sender.sent == []


class TestNotifyBooking:
    def test_uses_owner_address_and_booking_variables(
        self, notification_service, booking, email_sender, regular_user
    ):
        assert notification_service.notify_booking(booking, NotificationType.BOOKING_CONFIRMED)

        message = email_sender.sent[0]
        assert message["to"] == regular_user.email
        assert message["subject"] == "Booking Approved: Confocal Microscope"
        assert "Jan 10, 2024 09:00" in message["html"]

    def test_respects_opt_out(self, notification_service, booking, email_sender, db, regular_user):
        user = db.get(User, regular_user.id)
        user.email_notifications = False
        db.commit()

        assert notification_service.notify_booking(booking, NotificationType.BOOKING_UPDATE) is False
        assert email_sender.sent == []

    def test_owner_without_address(self, notification_service, booking, email_sender, db, regular_user):
        user = db.get(User, regular_user.id)
        user.email = None
        db.commit()

        assert notification_service.notify_booking(booking, NotificationType.BOOKING_UPDATE) is False
        assert email_sender.sent == []


def test_booking_variables(booking):
    variables = booking_variables(booking)

    assert variables["instrument_name"] == "Confocal Microscope"
    assert variables["user_name"] == "Rosalind Researcher"
    assert variables["start_date"] == "Jan 10, 2024 09:00"
    assert variables["end_date"] == "Jan 10, 2024 10:30"
    assert variables["time_range"] == "Jan 10, 2024 09:00 - 10:30"
    assert variables["status"] == "confirmed"
    assert variables["purpose"] == "Fluorescence imaging"


def test_service_without_sender_builds_console_sender(db):
    service = NotificationService(db)
    assert service.notify("a@lab.example", "booking_update", {"instrument_name": "NMR"})
    assert service.email_sender.outbox[-1]["subject"] == "Booking Update: NMR"
