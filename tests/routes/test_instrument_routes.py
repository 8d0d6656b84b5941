# tests/routes/test_instrument_routes.py
"""HTTP tests for /instruments."""

from tests.helpers.booking_helpers import auth_headers


def test_list(client, instrument, second_instrument, regular_user):
    resp = client.get("/instruments", headers=auth_headers(regular_user))
    assert resp.status_code == 200
    assert [i["name"] for i in resp.json()] == ["Confocal Microscope", "DNA Sequencer"]


def test_admin_crud(client, admin_user):
    created = client.post(
        "/instruments",
        json={"name": "Flow Cytometer", "type": "Cytometer", "location": "Room 4.01"},
        headers=auth_headers(admin_user),
    )
    assert created.status_code == 201
    instrument_id = created.json()["id"]
    assert created.json()["status"] == "available"

    patched = client.patch(
        f"/instruments/{instrument_id}",
        json={"description": "Four-laser analyser"},
        headers=auth_headers(admin_user),
    )
    assert patched.json()["description"] == "Four-laser analyser"
    assert patched.json()["location"] == "Room 4.01"

    status_resp = client.put(
        f"/instruments/{instrument_id}/status",
        json={"status": "maintenance"},
        headers=auth_headers(admin_user),
    )
    assert status_resp.json()["status"] == "maintenance"

    record = client.post(
        f"/instruments/{instrument_id}/maintenance",
        json={"performed_on": "2024-02-01", "description": "Fluidics cleaned"},
        headers=auth_headers(admin_user),
    )
    assert record.status_code == 201
    assert record.json()["description"] == "Fluidics cleaned"

    deleted = client.delete(f"/instruments/{instrument_id}", headers=auth_headers(admin_user))
    assert deleted.status_code == 204
    gone = client.get(f"/instruments/{instrument_id}", headers=auth_headers(admin_user))
    assert gone.status_code == 404


def test_writes_require_admin(client, instrument, regular_user):
    resp = client.put(
        f"/instruments/{instrument.id}/status",
        json={"status": "offline"},
        headers=auth_headers(regular_user),
    )
    assert resp.status_code == 403


def test_duplicate_name(client, instrument, admin_user):
    resp = client.post(
        "/instruments",
        json={"name": "Confocal Microscope", "location": "Room 1"},
        headers=auth_headers(admin_user),
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "INSTRUMENT_NAME_TAKEN"


def test_invalid_status(client, instrument, admin_user):
    resp = client.put(
        f"/instruments/{instrument.id}/status",
        json={"status": "broken"},
        headers=auth_headers(admin_user),
    )
    assert resp.status_code == 422
