# tests/conftest.py

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from task_manager.config import Settings
from task_manager.core.auth import AuthService
from task_manager.core.sessions import SessionStore
from task_manager.core.tasks import TaskService
from task_manager.database import RecordStore
from task_manager.main import create_app


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings isolated to a per-test data directory. bcrypt runs at its
    minimum cost so hashing does not dominate the test run.
    """
    return Settings(
        data_dir=tmp_path / "data",
        session_secret="test-secret",
        bcrypt_rounds=4,
        allowed_origins=["http://localhost:3000"],
    )


@pytest.fixture()
def store(settings: Settings) -> RecordStore:
    return RecordStore(settings.data_dir)


@pytest.fixture()
def sessions(settings: Settings) -> SessionStore:
    return SessionStore(max_age=settings.session_max_age)


@pytest.fixture()
def auth_service(store: RecordStore, sessions: SessionStore) -> AuthService:
    return AuthService(store, sessions, bcrypt_rounds=4)


@pytest.fixture()
def task_service(store: RecordStore) -> TaskService:
    return TaskService(store)


@pytest.fixture()
def client(settings: Settings) -> TestClient:
    with TestClient(create_app(settings)) as c:
        yield c
