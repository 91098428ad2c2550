from minbar.services.maintenance import MaintenanceService
from minbar.storage import SqliteRepository


def test_status_defaults_to_off(client):
    response = client.get("/config/status")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "data": {"maintenance": False}}


def test_toggle_requires_superadmin(client, admin_headers):
    assert client.post("/config/maintenance", json={"maintenance": True}).status_code == 403

    response = client.post("/config/maintenance", json={"maintenance": True}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Maintenance mode enabled"
    assert client.get("/config/status").json()["data"]["maintenance"] is True

    response = client.post("/config/maintenance", json={"maintenance": False}, headers=admin_headers)
    assert response.json()["data"] == {"maintenance": False}


def test_toggle_rejects_non_boolean(client, admin_headers):
    response = client.post("/config/maintenance", json={"maintenance": "maybe"}, headers=admin_headers)
    assert response.status_code == 400


def test_flag_survives_restart(tmp_path):
    db = tmp_path / "flag.db"
    MaintenanceService(SqliteRepository(db)).set(True)
    assert MaintenanceService(SqliteRepository(db)).get() is True
