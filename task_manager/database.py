# task_manager/database.py

import os
import json
import logging
import tempfile
from threading import Lock
from pathlib import Path
from task_manager.core.errors import StoreError


logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "tasks")


class RecordStore:
    """
    Flat-file persistence for the users and tasks collections.

    Each collection is one JSON array in data_dir/<collection>.json. Every
    operation reads or rewrites the whole array; callers that read, mutate
    and write back must hold lock(collection) for the whole cycle.
    """

    def __init__(self, data_dir: str | Path = "data"):
        self.data_dir = Path(data_dir)
        self._locks = {name: Lock() for name in COLLECTIONS}

    def path_for(self, collection: str) -> Path:
        if collection not in COLLECTIONS:
            raise StoreError(f"Unknown collection: {collection}")
        return self.data_dir / f"{collection}.json"

    def lock(self, collection: str) -> Lock:
        self.path_for(collection)
        return self._locks[collection]

    def read_all(self, collection: str) -> list[dict]:
        path = self.path_for(collection)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except UnicodeDecodeError:
            logger.warning("Ignoring %s: not valid UTF-8", path)
            return []
        except OSError as e:
            raise StoreError(f"Failed to read {collection}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring invalid JSON in %s", path)
            return []

        if not isinstance(data, list):
            logger.warning("Ignoring %s: expected a JSON array, got %s", path, type(data).__name__)
            return []
        return [r for r in data if isinstance(r, dict)]

    def write_all(self, collection: str, records: list[dict]) -> bool:
        path = self.path_for(collection)
        try:
            payload = json.dumps(records, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StoreError(f"Failed to serialize {collection}: {e}") from e

        tmp_name = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.data_dir, suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise StoreError(f"Failed to write {collection}: {e}") from e

        logger.debug("Wrote %d %s record(s) to %s", len(records), collection, path)
        return True

    def find(self, collection: str, **match) -> dict | None:
        for record in self.read_all(collection):
            if all(record.get(k) == v for k, v in match.items()):
                return record
        return None

    def filter(self, collection: str, **match) -> list[dict]:
        return [
            record for record in self.read_all(collection)
            if all(record.get(k) == v for k, v in match.items())
        ]
