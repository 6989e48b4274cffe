"""
HTTP surface: envelopes, status codes and the documented scenarios.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from aura.app import create_app
from aura.core.config import Settings
from aura.repositories.base import StoreUnavailable
from aura.repositories.json_storage import JsonFileStore
from aura.repositories.memory_store import MemoryStore


@pytest.fixture()
def settings() -> Settings:
    return Settings(storage_backend="memory", report_recipient="admin@example.com")


@pytest.fixture()
def client(settings):
    app = create_app(settings=settings, store=MemoryStore())
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    res = client.get("/")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["status"] == "OK"
    assert body["backend"] == "memory"


def test_post_application_then_list(client, application_payload):
    res = client.post("/api/applications", json=application_payload)
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    application = body["application"]
    assert application["name"] == "Ada"
    assert isinstance(application["id"], int) and application["id"] > 0
    assert application["read"] is False

    listed = client.get("/api/applications").json()
    assert listed["success"] is True
    assert [a["id"] for a in listed["applications"]] == [application["id"]]


def test_mark_read(client, application_payload):
    app_id = client.post("/api/applications", json=application_payload).json()["application"]["id"]
    for _ in range(2):
        res = client.put(f"/api/applications/{app_id}/mark-read")
        assert res.status_code == 200
        assert res.json()["application"]["read"] is True


def test_missing_required_fields_is_400(client):
    res = client.post("/api/applications", json={"name": "Ada"})
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert "surname" in body["error"]


def test_non_object_body_is_400(client):
    res = client.post("/api/coaches", json=[1, 2, 3])
    assert res.status_code == 400
    assert res.json()["success"] is False


def test_malformed_json_is_400(client):
    res = client.post("/api/lessons", content=b"{oops", headers={"content-type": "application/json"})
    assert res.status_code == 400
    assert res.json() == {"success": False, "error": "Malformed request body"}


def test_delete_missing_id_is_404(client):
    res = client.delete("/api/applications/99999")
    assert res.status_code == 404
    assert res.json()["success"] is False


def test_delete_then_delete_again(client):
    coach = client.post("/api/coaches", json={"name": "Alan", "surname": "Turing"}).json()["coach"]
    assert client.delete(f"/api/coaches/{coach['id']}").json() == {"success": True}
    assert client.get("/api/coaches").json()["coaches"] == []
    second = client.delete(f"/api/coaches/{coach['id']}")
    assert second.status_code == 404
    assert second.json()["success"] is False


def test_student_partial_update(client, student_payload):
    student = client.post("/api/students", json=student_payload).json()["student"]
    res = client.put(f"/api/students/{student['id']}", json={"rank": "Gold"})
    assert res.status_code == 200
    updated = res.json()["student"]
    assert updated["rank"] == "Gold"
    assert updated["schedule"] == student_payload["schedule"]

    fetched = client.get(f"/api/students/{student['id']}").json()["student"]
    assert fetched == updated


def test_update_missing_student_is_404(client):
    res = client.put("/api/students/12345", json={"rank": "Gold"})
    assert res.status_code == 404
    assert res.json()["success"] is False


def test_lessons_have_no_update_route(client):
    lesson = client.post("/api/lessons", json={"date": "2024-05-01", "notes": "aim"}).json()["lesson"]
    res = client.put(f"/api/lessons/{lesson['id']}", json={"notes": "changed"})
    assert res.status_code == 405
    assert res.json()["success"] is False
    assert client.get("/api/lessons").json()["lessons"][0]["notes"] == "aim"


def test_unknown_route_uses_error_envelope(client):
    res = client.get("/api/payments")
    assert res.status_code == 404
    assert res.json()["success"] is False


def test_store_failure_is_500_envelope(settings, tmp_path):
    path = tmp_path / "data.json"
    path.write_text("{broken", encoding="utf-8")
    app = create_app(settings=settings, store=JsonFileStore(path))
    with TestClient(app) as client:
        res = client.get("/api/students")
    assert res.status_code == 500
    assert res.json()["success"] is False


def test_store_unavailable_maps_to_500(settings):
    class DownStore(MemoryStore):
        def list(self, collection):
            raise StoreUnavailable("database is down")

    app = create_app(settings=settings, store=DownStore())
    with TestClient(app) as client:
        res = client.get("/api/coaches")
    assert res.status_code == 500
    assert res.json() == {"success": False, "error": "database is down"}


def test_on_demand_report(client):
    sent = []
    worker = client.app.state.report_worker
    worker.service.sender = lambda subject, to, html, text, **kw: sent.append((to, html)) or True

    client.post("/api/coaches", json={"name": "Alan", "surname": "Turing"})
    res = client.post("/api/reports/send")
    assert res.json() == {"success": True, "sent": True}
    assert sent[0][0] == "admin@example.com"
    assert "<td><strong>1</strong>coaches</td>" in sent[0][1]
