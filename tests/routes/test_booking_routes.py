# tests/routes/test_booking_routes.py
"""HTTP tests for /bookings."""

from datetime import datetime, timedelta, timezone

import pytest

from tests.helpers.booking_helpers import auth_headers


def _future(days: int = 3, hour: int = 9) -> datetime:
    base = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
    return (base + timedelta(days=days)).replace(hour=hour)


@pytest.fixture
def booking_payload(instrument):
    start = _future()
    return {
        "instrument_id": instrument.id,
        "start": start.isoformat(),
        "end": (start + timedelta(hours=2)).isoformat(),
        "purpose": "Live-cell imaging",
    }


@pytest.fixture
def created(client, regular_user, booking_payload):
    resp = client.post("/bookings", json=booking_payload, headers=auth_headers(regular_user))
    assert resp.status_code == 201
    return resp.json()


class TestAuth:
    def test_missing_identity(self, client):
        assert client.get("/bookings").status_code == 401

    def test_unknown_identity(self, client):
        resp = client.get("/bookings", headers={"X-User-Id": "01HNOBODY0000000000000000"})
        assert resp.status_code == 401


class TestCreate:
    def test_quick_booking(self, created, regular_user, email_sender):
        assert created["status"] == "confirmed"
        assert created["approval_state"] == "approved"
        assert created["progress_state"] == "not_started"
        assert created["user_name"] == regular_user.name
        assert created["instrument_name"] == "Confocal Microscope"
        assert created["version"] == 1
        assert created["comments"] == []
        assert email_sender.subjects() == ["Booking Confirmation: Confocal Microscope"]

    def test_request_flow_with_samples(self, client, regular_user, instrument):
        resp = client.post(
            "/bookings?flow=edit",
            json={
                "instrument_id": instrument.id,
                "start": _future().isoformat(),
                "sample_count": 10,
                "time_per_sample_minutes": 12,
                "purpose": "Plate reader run",
            },
            headers=auth_headers(regular_user),
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "pending"
        assert body["sample_info"] == {
            "sample_count": 10,
            "time_per_sample_minutes": 12.0,
            "duration_hours": 2.5,
        }

    def test_end_before_start(self, client, regular_user, booking_payload):
        booking_payload["end"] = booking_payload["start"]
        resp = client.post("/bookings", json=booking_payload, headers=auth_headers(regular_user))
        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "INVALID_INTERVAL"

    def test_missing_duration(self, client, regular_user, booking_payload):
        del booking_payload["end"]
        resp = client.post("/bookings", json=booking_payload, headers=auth_headers(regular_user))
        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "MISSING_DURATION"

    def test_unknown_field_rejected(self, client, regular_user, booking_payload):
        booking_payload["priority"] = "high"
        resp = client.post("/bookings", json=booking_payload, headers=auth_headers(regular_user))
        assert resp.status_code == 422

    def test_unknown_instrument(self, client, regular_user, booking_payload):
        booking_payload["instrument_id"] = "01HNOTANINSTRUMENT0000000"
        resp = client.post("/bookings", json=booking_payload, headers=auth_headers(regular_user))
        assert resp.status_code == 404


class TestReadAndList:
    def test_get_and_list(self, client, created, regular_user, admin_user):
        resp = client.get(f"/bookings/{created['id']}", headers=auth_headers(regular_user))
        assert resp.status_code == 200
        assert resp.json()["id"] == created["id"]

        listed = client.get("/bookings", headers=auth_headers(admin_user)).json()
        assert [b["id"] for b in listed] == [created["id"]]

        mine = client.get(
            f"/bookings?user_id={admin_user.id}", headers=auth_headers(admin_user)
        ).json()
        assert mine == []

    def test_unknown_booking(self, client, regular_user):
        resp = client.get("/bookings/01HNOBOOKING0000000000000", headers=auth_headers(regular_user))
        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "BOOKING_NOT_FOUND"

    def test_upcoming(self, client, created, regular_user, other_user):
        mine = client.get("/bookings/upcoming", headers=auth_headers(regular_user)).json()
        assert [b["id"] for b in mine] == [created["id"]]

        theirs = client.get("/bookings/upcoming", headers=auth_headers(other_user)).json()
        assert theirs == []

    def test_current_is_empty_for_future_booking(self, client, created, regular_user):
        assert client.get("/bookings/current", headers=auth_headers(regular_user)).json() == []


class TestUpdate:
    def test_patch_purpose(self, client, created, regular_user, email_sender):
        email_sender.clear()
        resp = client.patch(
            f"/bookings/{created['id']}",
            json={"purpose": "Fixed-cell imaging", "expected_version": 1},
            headers=auth_headers(regular_user),
        )
        assert resp.status_code == 200
        assert resp.json()["purpose"] == "Fixed-cell imaging"
        assert resp.json()["version"] == 2
        assert email_sender.subjects() == ["Booking Update: Confocal Microscope"]

    def test_stale_version(self, client, created, regular_user):
        client.patch(
            f"/bookings/{created['id']}",
            json={"purpose": "First", "expected_version": 1},
            headers=auth_headers(regular_user),
        )
        resp = client.patch(
            f"/bookings/{created['id']}",
            json={"purpose": "Second", "expected_version": 1},
            headers=auth_headers(regular_user),
        )
        assert resp.status_code == 409
        assert resp.json()["detail"]["code"] == "STALE_BOOKING"

    def test_other_user_forbidden(self, client, created, other_user):
        resp = client.patch(
            f"/bookings/{created['id']}",
            json={"purpose": "Hijack"},
            headers=auth_headers(other_user),
        )
        assert resp.status_code == 403


class TestWorkflow:
    def test_request_approve_progress(self, client, regular_user, admin_user, booking_payload):
        booking = client.post(
            "/bookings?flow=edit", json=booking_payload, headers=auth_headers(regular_user)
        ).json()
        assert booking["status"] == "pending"

        forbidden = client.post(
            f"/bookings/{booking['id']}/approve", headers=auth_headers(regular_user)
        )
        assert forbidden.status_code == 403

        approved = client.post(f"/bookings/{booking['id']}/approve", headers=auth_headers(admin_user))
        assert approved.json()["status"] == "confirmed"

        started = client.post(
            f"/bookings/{booking['id']}/progress",
            json={"progress_state": "in_progress"},
            headers=auth_headers(regular_user),
        )
        assert started.json()["status"] == "In-Progress"

    def test_deny_with_reason(self, client, regular_user, admin_user, booking_payload, email_sender):
        booking = client.post(
            "/bookings?flow=edit", json=booking_payload, headers=auth_headers(regular_user)
        ).json()
        email_sender.clear()

        denied = client.post(
            f"/bookings/{booking['id']}/deny",
            json={"reason": "Instrument reserved for service"},
            headers=auth_headers(admin_user),
        )

        assert denied.json()["approval_state"] == "denied"
        assert denied.json()["status"] == "cancelled"
        assert "Instrument reserved for service" in email_sender.sent[0]["html"]

    def test_approve_confirmed_booking(self, client, created, admin_user):
        resp = client.post(f"/bookings/{created['id']}/approve", headers=auth_headers(admin_user))
        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "BOOKING_NOT_PENDING"

    def test_cancel_without_body_then_again(self, client, created, regular_user):
        first = client.post(f"/bookings/{created['id']}/cancel", headers=auth_headers(regular_user))
        assert first.status_code == 200
        assert first.json()["status"] == "cancelled"

        second = client.post(
            f"/bookings/{created['id']}/cancel",
            json={"reason": "Duplicate"},
            headers=auth_headers(regular_user),
        )
        assert second.status_code == 400
        assert second.json()["detail"]["code"] == "BOOKING_ALREADY_CANCELLED"

    def test_delete_completed(self, client, created, admin_user, regular_user):
        client.post(
            f"/bookings/{created['id']}/progress",
            json={"progress_state": "completed"},
            headers=auth_headers(regular_user),
        )
        assert client.delete("/bookings/completed", headers=auth_headers(regular_user)).status_code == 403

        resp = client.delete("/bookings/completed", headers=auth_headers(admin_user))
        assert resp.json() == {"deleted_count": 1}


class TestDeleteAndComments:
    def test_comment_lifecycle(self, client, created, regular_user, admin_user, email_sender):
        email_sender.clear()
        resp = client.post(
            f"/bookings/{created['id']}/comments",
            json={"content": "Please leave the 63x objective mounted"},
            headers=auth_headers(admin_user),
        )
        assert resp.status_code == 201
        comment = resp.json()
        assert comment["user_name"] == admin_user.name
        assert len(email_sender.sent) == 1

        comments = client.get(
            f"/bookings/{created['id']}/comments", headers=auth_headers(regular_user)
        ).json()
        assert [c["id"] for c in comments] == [comment["id"]]

        detail = client.get(f"/bookings/{created['id']}", headers=auth_headers(regular_user)).json()
        assert [c["id"] for c in detail["comments"]] == [comment["id"]]

        forbidden = client.delete(
            f"/bookings/{created['id']}/comments/{comment['id']}",
            headers=auth_headers(regular_user),
        )
        assert forbidden.status_code == 403

        deleted = client.delete(
            f"/bookings/{created['id']}/comments/{comment['id']}",
            headers=auth_headers(admin_user),
        )
        assert deleted.status_code == 204

    def test_empty_comment(self, client, created, regular_user):
        resp = client.post(
            f"/bookings/{created['id']}/comments",
            json={"content": "   "},
            headers=auth_headers(regular_user),
        )
        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "EMPTY_COMMENT"

    def test_deleted_booking_has_no_comments(self, client, created, regular_user, admin_user):
        client.post(
            f"/bookings/{created['id']}/comments",
            json={"content": "Stage is sticky"},
            headers=auth_headers(regular_user),
        )

        assert client.delete(f"/bookings/{created['id']}", headers=auth_headers(regular_user)).status_code == 403
        assert client.delete(f"/bookings/{created['id']}", headers=auth_headers(admin_user)).status_code == 204

        resp = client.get(f"/bookings/{created['id']}/comments", headers=auth_headers(regular_user))
        assert resp.status_code == 404
