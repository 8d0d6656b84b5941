# tests/routes/test_schedule_routes.py
"""HTTP tests for /schedule."""

from labbook.core.enums import ApprovalState
from tests.helpers.booking_helpers import auth_headers, make_booking, utc


def test_booked_intervals(client, db, instrument, regular_user):
    booking = make_booking(
        db, instrument, regular_user, utc(2024, 1, 10, 9, 0), utc(2024, 1, 10, 10, 0)
    )

    resp = client.get(
        f"/schedule/instruments/{instrument.id}/booked?day=2024-01-10",
        headers=auth_headers(regular_user),
    )

    assert resp.status_code == 200
    intervals = resp.json()
    assert len(intervals) == 1
    assert intervals[0]["booking_id"] == booking.id
    assert intervals[0]["status"] == "confirmed"


def test_booked_intervals_unknown_instrument(client, regular_user):
    resp = client.get(
        "/schedule/instruments/01HNOTANINSTRUMENT0000000/booked?day=2024-01-10",
        headers=auth_headers(regular_user),
    )
    assert resp.status_code == 404


def test_booked_intervals_requires_day(client, instrument, regular_user):
    resp = client.get(
        f"/schedule/instruments/{instrument.id}/booked", headers=auth_headers(regular_user)
    )
    assert resp.status_code == 422


def test_calendar_week(client, db, instrument, regular_user):
    inside = make_booking(db, instrument, regular_user, utc(2024, 1, 7, 9), utc(2024, 1, 7, 10))
    make_booking(db, instrument, regular_user, utc(2024, 1, 6, 9), utc(2024, 1, 6, 10))

    resp = client.get(
        "/schedule/calendar?view=week&anchor=2024-01-10", headers=auth_headers(regular_user)
    )

    assert [b["id"] for b in resp.json()] == [inside.id]


def test_calendar_rejects_unknown_view(client, regular_user):
    resp = client.get(
        "/schedule/calendar?view=year&anchor=2024-01-10", headers=auth_headers(regular_user)
    )
    assert resp.status_code == 422


def test_delay_preview_is_admin_only(client, db, instrument, regular_user, admin_user):
    make_booking(db, instrument, regular_user, utc(2024, 1, 10, 12), utc(2024, 1, 10, 13))

    denied = client.get(
        "/schedule/delay/preview?cutoff=2024-01-10T12:00:00Z", headers=auth_headers(regular_user)
    )
    assert denied.status_code == 403

    preview = client.get(
        "/schedule/delay/preview?cutoff=2024-01-10T12:00:00Z", headers=auth_headers(admin_user)
    )
    assert len(preview.json()) == 1


def test_apply_delay(client, db, instrument, regular_user, admin_user, email_sender):
    make_booking(db, instrument, regular_user, utc(2024, 1, 10, 11, 30), utc(2024, 1, 10, 12, 30))
    moved = make_booking(
        db,
        instrument,
        regular_user,
        utc(2024, 1, 10, 12, 0),
        utc(2024, 1, 10, 13, 0),
        approval=ApprovalState.PENDING,
    )

    resp = client.post(
        "/schedule/delay",
        json={
            "delay_minutes": 30,
            "cutoff": "2024-01-10T12:00:00Z",
            "reason": "Helium refill",
        },
        headers=auth_headers(admin_user),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["affected_count"] == 1
    assert body["booking_ids"] == [moved.id]
    assert body["notified_count"] == 1

    booking = client.get(f"/bookings/{moved.id}", headers=auth_headers(admin_user)).json()
    assert booking["start"].startswith("2024-01-10T12:30:00")


def test_apply_delay_validation(client, admin_user, regular_user):
    bad_delay = client.post(
        "/schedule/delay",
        json={"delay_minutes": 0, "cutoff": "2024-01-10T12:00:00Z"},
        headers=auth_headers(admin_user),
    )
    assert bad_delay.status_code == 400
    assert bad_delay.json()["detail"]["code"] == "INVALID_DELAY"

    bool_delay = client.post(
        "/schedule/delay",
        json={"delay_minutes": True, "cutoff": "2024-01-10T12:00:00Z"},
        headers=auth_headers(admin_user),
    )
    assert bool_delay.status_code == 422

    not_admin = client.post(
        "/schedule/delay",
        json={"delay_minutes": 30, "cutoff": "2024-01-10T12:00:00Z"},
        headers=auth_headers(regular_user),
    )
    assert not_admin.status_code == 403
