# tests/test_client.py

import pytest
from fastapi.testclient import TestClient

from task_manager_client import ApiError, TaskManagerClient


@pytest.fixture()
def api(client: TestClient) -> TaskManagerClient:
    return TaskManagerClient("http://testserver", session=client)


def test_client_session_flow(api: TaskManagerClient) -> None:
    user = api.signup("Alice", "Smith", "a@x.com", "secret1")
    assert api.me()["id"] == user["id"]

    task = api.create_task("Buy milk", "Low", due_date="2025-01-01")
    assert api.get_task(task["id"]) == task
    assert api.list_tasks() == [task]

    updated = api.update_task(task["id"], description="2 litres", is_completed=True)
    assert updated["description"] == "2 litres"
    assert updated["isCompleted"] is True

    assert api.toggle_task(task["id"])["isCompleted"] is False
    assert api.task_stats()["total"] == 1

    api.delete_task(task["id"])
    assert api.list_tasks() == []

    api.logout()
    assert api.login("a@x.com", "secret1")["id"] == user["id"]


def test_client_raises_api_error(api: TaskManagerClient) -> None:
    with pytest.raises(ApiError) as exc:
        api.me()
    assert exc.value.status_code == 401
    assert exc.value.code == "NOT_AUTHENTICATED"

    with pytest.raises(ApiError) as exc:
        api.login("nobody@x.com", "secret1")
    assert exc.value.status_code == 401
    assert exc.value.message == "Invalid credentials"
