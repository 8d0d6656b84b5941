# tests/services/test_delay_service.py
from datetime import timedelta

import pytest

from labbook.core.enums import ProgressState
from labbook.core.exceptions import (
    ForbiddenException,
    PersistenceException,
    RepositoryException,
    ValidationException,
)
from labbook.models.booking import Booking
from tests.helpers.booking_helpers import make_booking, utc

CUTOFF = utc(2024, 1, 10, 12, 0)


@pytest.fixture
def morning_and_noon(db, instrument, regular_user):
    before = make_booking(
        db, instrument, regular_user, utc(2024, 1, 10, 11, 30), utc(2024, 1, 10, 12, 30)
    )
    at_cutoff = make_booking(
        db, instrument, regular_user, utc(2024, 1, 10, 12, 0), utc(2024, 1, 10, 13, 15)
    )
    return before, at_cutoff


def _reload(db, booking_id):
    db.expire_all()
    return db.query(Booking).filter(Booking.id == booking_id).one()


def test_shifts_bookings_from_cutoff(delay_service, db, admin_user, morning_and_noon):
    before, at_cutoff = morning_and_noon

    result = delay_service.apply_delay(admin_user, 30, CUTOFF, reason="Laser alignment")

    assert result.affected_count == 1
    assert result.booking_ids == [at_cutoff.id]

    moved = _reload(db, at_cutoff.id)
    assert moved.start == utc(2024, 1, 10, 12, 30)
    assert moved.end == utc(2024, 1, 10, 13, 45)
    assert moved.version == 2

    untouched = _reload(db, before.id)
    assert untouched.start == utc(2024, 1, 10, 11, 30)
    assert untouched.version == 1


def test_duration_is_preserved(delay_service, db, admin_user, instrument, regular_user):
    bookings = [
        make_booking(
            db,
            instrument,
            regular_user,
            utc(2024, 1, 10, 13) + timedelta(hours=i),
            utc(2024, 1, 10, 13, 20) + timedelta(hours=i, minutes=10 * i),
        )
        for i in range(3)
    ]
    lengths = {b.id: b.end - b.start for b in bookings}

    delay_service.apply_delay(admin_user, 45, CUTOFF)

    for booking_id, length in lengths.items():
        moved = _reload(db, booking_id)
        assert moved.end - moved.start == length


def test_moves_bookings_in_every_state(delay_service, db, admin_user, instrument, regular_user):
    cancelled = make_booking(
        db,
        instrument,
        regular_user,
        utc(2024, 1, 10, 14),
        utc(2024, 1, 10, 15),
        progress=ProgressState.CANCELLED,
    )
    completed = make_booking(
        db,
        instrument,
        regular_user,
        utc(2024, 1, 10, 16),
        utc(2024, 1, 10, 17),
        progress=ProgressState.COMPLETED,
    )

    result = delay_service.apply_delay(admin_user, 15, CUTOFF)

    assert set(result.booking_ids) == {cancelled.id, completed.id}


def test_nothing_after_cutoff(delay_service, admin_user, morning_and_noon):
    result = delay_service.apply_delay(admin_user, 30, utc(2024, 2, 1, 0, 0))
    assert result.affected_count == 0
    assert result.booking_ids == []


def test_preview_lists_what_would_move(delay_service, morning_and_noon):
    _, at_cutoff = morning_and_noon
    assert [b.id for b in delay_service.preview_delay(CUTOFF)] == [at_cutoff.id]


def test_owners_are_notified(delay_service, admin_user, regular_user, morning_and_noon, email_sender):
    result = delay_service.apply_delay(admin_user, 30, CUTOFF, reason="  Cryostat refill  ")

    assert result.notified_count == 1
    assert email_sender.subjects() == ["Schedule Delay: Confocal Microscope"]
    assert email_sender.sent[0]["to"] == regular_user.email
    assert "delayed by 30 minutes" in email_sender.sent[0]["html"]
    assert "Jan 10, 2024 12:30 - 13:45" in email_sender.sent[0]["html"]
    assert "Cryostat refill" in email_sender.sent[0]["html"]


def test_failed_notification_still_applies_delay(
    delay_service, db, admin_user, morning_and_noon, email_sender
):
    _, at_cutoff = morning_and_noon
    email_sender.fail = True

    result = delay_service.apply_delay(admin_user, 30, CUTOFF)

    assert result.affected_count == 1
    assert result.notified_count == 0
    assert _reload(db, at_cutoff.id).start == utc(2024, 1, 10, 12, 30)


@pytest.mark.parametrize("delay", [0, -15, 12.5, True, "30"])
def test_invalid_delay(delay_service, admin_user, delay):
    with pytest.raises(ValidationException) as exc_info:
        delay_service.apply_delay(admin_user, delay, CUTOFF)
    assert exc_info.value.code == "INVALID_DELAY"


def test_reason_too_short(delay_service, admin_user):
    with pytest.raises(ValidationException) as exc_info:
        delay_service.apply_delay(admin_user, 30, CUTOFF, reason="  ok  ")
    assert exc_info.value.code == "INVALID_DELAY_REASON"


def test_requires_admin(delay_service, regular_user, db, morning_and_noon):
    _, at_cutoff = morning_and_noon
    with pytest.raises(ForbiddenException):
        delay_service.apply_delay(regular_user, 30, CUTOFF)
    assert _reload(db, at_cutoff.id).start == utc(2024, 1, 10, 12, 0)


def test_storage_failure_moves_nothing(
    delay_service, db, admin_user, morning_and_noon, email_sender, monkeypatch
):
    _, at_cutoff = morning_and_noon

    def fail_flush():
        raise RepositoryException("connection reset")

    monkeypatch.setattr(delay_service.booking_repository, "flush", fail_flush)

    with pytest.raises(PersistenceException) as exc_info:
        delay_service.apply_delay(admin_user, 30, CUTOFF)

    assert exc_info.value.code == "DELAY_FAILED"
    assert exc_info.value.details["booking_ids"] == [at_cutoff.id]
    assert _reload(db, at_cutoff.id).start == utc(2024, 1, 10, 12, 0)
    assert email_sender.sent == []
