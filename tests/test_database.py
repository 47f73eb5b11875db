# tests/test_database.py

import json
from pathlib import Path

import pytest

from task_manager.core.errors import StoreError
from task_manager.database import RecordStore


def test_read_missing_collection_is_empty(store: RecordStore) -> None:
    assert store.read_all("users") == []
    assert store.read_all("tasks") == []


@pytest.mark.parametrize(
    "content",
    [b"", b"{not json", b'{"id": "1"}', b"42", b"\xff\xfe", b"\xff\xfe[not utf8]"],
)
def test_read_invalid_content_is_empty(store: RecordStore, content: bytes) -> None:
    store.data_dir.mkdir(parents=True)
    store.path_for("tasks").write_bytes(content)
    assert store.read_all("tasks") == []


def test_write_replaces_whole_collection(store: RecordStore) -> None:
    store.write_all("users", [{"id": "1"}, {"id": "2"}])
    store.write_all("users", [{"id": "3"}])

    assert store.read_all("users") == [{"id": "3"}]
    on_disk = json.loads(store.path_for("users").read_text(encoding="utf-8"))
    assert on_disk == [{"id": "3"}]
    assert not list(store.data_dir.glob("*.tmp"))


def test_find_and_filter_match_all_fields(store: RecordStore) -> None:
    store.write_all("tasks", [
        {"id": "t1", "userId": "u1"},
        {"id": "t2", "userId": "u2"},
        {"id": "t3", "userId": "u1"},
    ])

    assert store.find("tasks", id="t2")["userId"] == "u2"
    assert store.find("tasks", id="t2", userId="u1") is None
    assert [r["id"] for r in store.filter("tasks", userId="u1")] == ["t1", "t3"]


def test_unknown_collection_is_rejected(store: RecordStore) -> None:
    with pytest.raises(StoreError):
        store.read_all("projects")
    with pytest.raises(StoreError):
        store.lock("projects")


def test_write_failure_raises_store_error(tmp_path: Path) -> None:
    blocker = tmp_path / "data"
    blocker.write_text("not a directory", encoding="utf-8")
    store = RecordStore(blocker)

    with pytest.raises(StoreError):
        store.write_all("users", [{"id": "1"}])


def test_unserializable_records_leave_file_untouched(store: RecordStore) -> None:
    store.write_all("tasks", [{"id": "t1"}])
    with pytest.raises(StoreError):
        store.write_all("tasks", [{"id": object()}])
    assert store.read_all("tasks") == [{"id": "t1"}]
