"""Integration tests for the HTTP and WebSocket surface (in-memory store per test)."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from edu_service.api.deps import get_verifier
from edu_service.app import create_app
from edu_service.application.dto.principal import Principal
from edu_service.config import settings
from edu_service.domain.value_objects.enums import UserRole
from edu_service.infrastructure.memory.store import CollectionStore
from edu_service.scripts.seed_dev_data import seed


def _token(user_id: str = "u-1", role: UserRole = UserRole.TEACHER) -> str:
    return get_verifier().issue(Principal(user_id=user_id, email=f"{user_id}@example.com", role=role))


def _auth(user_id: str = "u-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {_token(user_id)}"}


@pytest.fixture
def app_store():
    store = CollectionStore()
    seed(store)
    return create_app(store), store


@pytest.fixture
def client(app_store):
    app, _ = app_store
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def store(app_store):
    _, store = app_store
    return store


def test_health_family(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/health/live").json()["status"] == "alive"

    ready = client.get("/health/ready")
    assert ready.status_code == 200
    assert ready.json()["status"] == "ready"

    detailed = client.get("/health/detailed").json()
    assert detailed["store"]["records"]["users"] == 3
    assert detailed["environment"] == settings.APP_ENV


def test_metrics_count_requests_and_reset(client):
    client.get("/health/live")
    client.get("/health/live")

    metrics = client.get("/health/metrics").json()
    assert metrics["application"]["requests"] >= 2
    assert metrics["application"]["byRoute"]["GET /health/live"] == 2

    assert client.post("/health/metrics/reset").json()["success"] is True
    # the reset request itself is counted once it completes
    assert client.get("/health/metrics").json()["application"]["requests"] == 1


def test_login_with_seeded_user(client):
    resp = client.post(
        "/api/auth/login",
        json={"email": "john@example.com", "password": settings.DEMO_PASSWORD},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["user"]["role"] == "teacher"
    assert body["token"].count(".") == 2


def test_login_rejects_bad_password(client):
    resp = client.post(
        "/api/auth/login", json={"email": "john@example.com", "password": "wrong"},
    )
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid credentials"}


def test_register_then_duplicate(client, store):
    payload = {"name": "Mme Ngo", "email": "ngo@example.com", "password": "x", "role": "teacher"}

    first = client.post("/api/auth/register", json=payload)
    second = client.post("/api/auth/register", json=payload)

    assert first.status_code == 201
    assert first.json()["user"]["email"] == "ngo@example.com"
    assert second.status_code == 400
    assert any(u["email"] == "ngo@example.com" for u in store.rows("users"))


def test_login_for_user_created_through_collections_api(client):
    created = client.post(
        "/api/users", json={"name": "Bo", "email": "bo@example.com"}, headers=_auth(),
    )
    odd_role = client.post(
        "/api/users", json={"email": "kim@example.com", "role": "janitor"}, headers=_auth(),
    )
    assert created.status_code == 201
    assert odd_role.status_code == 201

    for email in ("bo@example.com", "kim@example.com"):
        resp = client.post(
            "/api/auth/login", json={"email": email, "password": settings.DEMO_PASSWORD},
        )
        assert resp.status_code == 200
        assert resp.json()["user"]["role"] == "student"


def test_collections_require_auth(client):
    resp = client.get("/api/students")
    assert resp.status_code in (401, 403)


def test_collection_crud_over_http(client):
    created = client.post("/api/students", json={"name": "Ana", "grade": 5}, headers=_auth())
    assert created.status_code == 201
    record = created.json()["data"]

    fetched = client.get(f"/api/students/{record['id']}", headers=_auth())
    assert fetched.json()["data"]["name"] == "Ana"

    patched = client.patch(f"/api/students/{record['id']}", json={"name": "Ana B"}, headers=_auth())
    assert patched.json()["data"]["name"] == "Ana B"
    assert patched.json()["data"]["createdAt"] == record["createdAt"]

    deleted = client.delete(f"/api/students/{record['id']}", headers=_auth())
    assert deleted.json() == {"success": True, "data": True, "message": "Record deleted successfully"}

    missing = client.get(f"/api/students/{record['id']}", headers=_auth())
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Record not found"}


def test_list_with_filters_search_and_paging(client):
    for name, grade in [("Ana", 5), ("Bob", 3), ("Cleo", 5), ("Dan", 4)]:
        client.post("/api/grades", json={"name": name, "grade": grade}, headers=_auth())

    resp = client.get(
        "/api/grades",
        params=[("grade", "5"), ("grade", "4"), ("sort_by", "name"), ("sort_order", "desc"), ("limit", "2")],
        headers=_auth(),
    )

    body = resp.json()
    assert [r["name"] for r in body["data"]] == ["Dan", "Cleo"]
    assert body["pagination"] == {
        "page": 1, "limit": 2, "total": 3, "totalPages": 2, "hasNext": True, "hasPrev": False,
    }

    searched = client.get("/api/grades", params={"search": "cle"}, headers=_auth()).json()
    assert [r["name"] for r in searched["data"]] == ["Cleo"]


def test_bulk_endpoint(client, store):
    ids = [r["id"] for r in store.rows("students")]

    resp = client.post(
        "/api/students/bulk",
        json={"ids": [ids[0], "ghost"], "operation": "archive"},
        headers=_auth(),
    )

    body = resp.json()
    assert body["success"] is True
    assert body["data"] == [
        {"id": ids[0], "success": True, "error": None},
        {"id": "ghost", "success": False, "error": "Record not found"},
    ]
    assert store.rows("students")[0]["isActive"] is False


def test_dashboard_and_my_notifications(client, store):
    school_id = store.rows("schools")[0]["id"]
    client.post(
        "/api/notifications",
        json={"userId": "u-1", "title": "Quiz graded", "isRead": False},
        headers=_auth(),
    )

    stats = client.get(f"/api/dashboard/{school_id}/stats", headers=_auth()).json()
    assert stats["data"]["totalStudents"] == 3
    assert stats["data"]["activeUsers"] == 3

    mine = client.get("/api/me/notifications", params={"unread_only": "true"}, headers=_auth()).json()
    (notification,) = mine["data"]

    marked = client.post(f"/api/me/notifications/{notification['id']}/read", headers=_auth())
    assert marked.json()["data"]["isRead"] is True
    assert client.get("/api/me/notifications", params={"unread_only": "true"}, headers=_auth()).json()["data"] == []


def test_ws_rejects_bad_token(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws?token=garbage") as ws:
            ws.receive_json()


def test_ws_heartbeat_and_relay(client):
    with client.websocket_connect(f"/ws?token={_token('u-1')}") as alice:
        assert alice.receive_json()["type"] == "user_status"
        with client.websocket_connect(f"/ws?token={_token('u-2')}") as bob:
            assert bob.receive_json()["type"] == "user_status"

            alice.send_json({"type": "heartbeat", "data": {}, "timestamp": 1, "id": "hb"})
            assert alice.receive_json()["type"] == "heartbeat"

            alice.send_json({"type": "message", "data": {"msg": "hi"}, "timestamp": 2, "id": "m1"})
            relayed = bob.receive_json()
            assert relayed["type"] == "message"
            assert relayed["data"] == {"msg": "hi"}
            assert relayed["id"] == "m1"

            bob.send_text("not a frame")
            assert bob.receive_json()["data"] == {"code": "invalid_payload"}


def test_shutdown_discards_records(app_store):
    app, store = app_store

    with TestClient(app) as client:
        resp = client.post("/api/schools", json={"name": "North"}, headers=_auth())
        assert resp.status_code == 201
        assert store.counts()["schools"] == 3

    assert sum(store.counts().values()) == 0
