# tests/test_api_tasks.py

import pytest
from fastapi.testclient import TestClient

from task_manager.config import Settings
from task_manager.main import create_app

from .helpers import signup_payload


def login_as(client: TestClient, email: str = "a@x.com") -> str:
    res = client.post("/api/auth/signup", json=signup_payload(email=email))
    assert res.status_code == 201
    return res.json()["user"]["id"]


def test_task_routes_require_authentication(client: TestClient) -> None:
    for method, path in [
        ("GET", "/api/tasks"),
        ("GET", "/api/tasks/stats"),
        ("GET", "/api/tasks/abc"),
        ("POST", "/api/tasks"),
        ("PUT", "/api/tasks/abc"),
        ("DELETE", "/api/tasks/abc"),
        ("PATCH", "/api/tasks/abc/toggle"),
    ]:
        res = client.request(method, path, json={} if method in ("POST", "PUT") else None)
        assert res.status_code == 401, (method, path)
        assert res.json()["code"] == "AUTH_REQUIRED"


def test_buy_milk_scenario(client: TestClient) -> None:
    user_id = login_as(client)
    client.post("/api/auth/logout")

    login = client.post("/api/auth/login", json={"emailAddress": "a@x.com", "password": "secret1"})
    assert login.status_code == 200
    assert login.json()["user"]["id"] == user_id

    created = client.post("/api/tasks", json={"title": "Buy milk", "priority": "Low"})
    assert created.status_code == 201
    task = created.json()["task"]
    assert task["isCompleted"] is False
    assert task["userId"] == user_id

    toggled = client.patch(f"/api/tasks/{task['id']}/toggle")
    assert toggled.status_code == 200
    assert toggled.json()["task"]["isCompleted"] is True

    assert client.delete(f"/api/tasks/{task['id']}").status_code == 200

    gone = client.get(f"/api/tasks/{task['id']}")
    assert gone.status_code == 404
    assert gone.json()["code"] == "TASK_NOT_FOUND"


def test_create_list_get_update(client: TestClient) -> None:
    login_as(client)

    created = client.post("/api/tasks", json={
        "title": "Write report",
        "description": "Quarterly",
        "priority": "High",
        "dueDate": "2025-06-30",
    }).json()["task"]

    listing = client.get("/api/tasks").json()
    assert listing["count"] == 1
    assert listing["tasks"] == [created]
    assert client.get(f"/api/tasks/{created['id']}").json()["task"] == created

    updated = client.put(f"/api/tasks/{created['id']}", json={"title": "Write final report", "userId": "someone-else"})
    assert updated.status_code == 200
    task = updated.json()["task"]
    assert task["title"] == "Write final report"
    assert task["description"] == "Quarterly"
    assert task["userId"] == created["userId"]

    cleared = client.put(f"/api/tasks/{created['id']}", json={"dueDate": None, "isCompleted": True}).json()["task"]
    assert cleared["dueDate"] is None
    assert cleared["isCompleted"] is True


def test_create_and_update_validation(client: TestClient) -> None:
    login_as(client)

    missing = client.post("/api/tasks", json={"priority": "Low"})
    assert missing.status_code == 400
    assert missing.json()["message"] == "Title is required"

    bad_priority = client.post("/api/tasks", json={"title": "x", "priority": "Urgent"})
    assert bad_priority.status_code == 400
    assert bad_priority.json()["message"] == "Priority must be Low, Medium, or High"

    bad_date = client.post("/api/tasks", json={"title": "x", "priority": "Low", "dueDate": "someday"})
    assert bad_date.status_code == 400

    task_id = client.post("/api/tasks", json={"title": "x", "priority": "Low"}).json()["task"]["id"]
    assert client.put(f"/api/tasks/{task_id}", json={"priority": "Urgent"}).status_code == 400
    assert client.put("/api/tasks/missing", json={"title": "y"}).status_code == 404


def test_tasks_of_other_users_are_hidden(client: TestClient) -> None:
    login_as(client, "a@x.com")
    task_id = client.post("/api/tasks", json={"title": "private", "priority": "Low"}).json()["task"]["id"]
    client.post("/api/auth/logout")

    login_as(client, "b@x.com")
    assert client.get("/api/tasks").json()["tasks"] == []
    assert client.get(f"/api/tasks/{task_id}").status_code == 404
    assert client.put(f"/api/tasks/{task_id}", json={"title": "mine"}).status_code == 404
    assert client.patch(f"/api/tasks/{task_id}/toggle").status_code == 404
    assert client.delete(f"/api/tasks/{task_id}").status_code == 404


def test_stats(client: TestClient) -> None:
    login_as(client)
    first = client.post("/api/tasks", json={"title": "a", "priority": "Low"}).json()["task"]
    client.post("/api/tasks", json={"title": "b", "priority": "Medium"})
    client.patch(f"/api/tasks/{first['id']}/toggle")

    stats = client.get("/api/tasks/stats").json()["stats"]
    assert stats == {"total": 2, "completed": 1, "pending": 1, "low": 1, "medium": 1, "high": 0}


def test_authenticated_requests_renew_the_cookie(client: TestClient) -> None:
    login_as(client)
    res = client.get("/api/tasks")
    assert res.status_code == 200
    assert "set-cookie" in res.headers


def test_deleted_user_session_is_rejected(client: TestClient) -> None:
    login_as(client)
    client.app.state.store.write_all("users", [])

    res = client.get("/api/tasks")
    assert res.status_code == 401
    assert client.get("/api/auth/me").status_code == 401


def test_unreadable_tasks_file_lists_as_empty(client: TestClient, settings: Settings) -> None:
    login_as(client)
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    (settings.data_dir / "tasks.json").write_bytes(b"\xff\xfe[not utf8]")

    res = client.get("/api/tasks")
    assert res.status_code == 200
    assert res.json()["tasks"] == []


def test_store_failure_is_reported_as_store_error(client: TestClient, settings: Settings) -> None:
    login_as(client)
    (settings.data_dir / "tasks.json").mkdir(parents=True)

    res = client.post("/api/tasks", json={"title": "a", "priority": "Low"})
    assert res.status_code == 500
    assert res.json()["success"] is False
    assert res.json()["code"] == "STORE_ERROR"


def test_unexpected_error_is_generic_500(settings: Settings, monkeypatch: pytest.MonkeyPatch) -> None:
    app = create_app(settings)

    def boom(user_id):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(app.state.task_service, "stats", boom)
    with TestClient(app, raise_server_exceptions=False) as client:
        login_as(client)
        res = client.get("/api/tasks/stats")

    assert res.status_code == 500
    assert res.json() == {"success": False, "message": "Internal server error", "code": "INTERNAL_ERROR"}
