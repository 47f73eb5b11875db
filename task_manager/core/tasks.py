# task_manager/core/tasks.py

import uuid
import logging
from datetime import date, datetime
from pydantic import ValidationError as PydanticValidationError
from task_manager.database import RecordStore
from task_manager.models import utc_now
from task_manager.models.task import Task, Priority
from task_manager.core.errors import ValidationError, NotFoundError


logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000
UPDATABLE_FIELDS = {"title", "description", "priority", "due_date", "is_completed"}


def validate_title(title) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required")
    title = title.strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError("Title must be between 1 and 200 characters")
    return title


def validate_description(description) -> str:
    if description is None:
        return ""
    if not isinstance(description, str):
        raise ValidationError("Description must be a string")
    description = description.strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError("Description must be less than 1000 characters")
    return description


def validate_priority(priority) -> Priority:
    if not priority:
        raise ValidationError("Priority is required")
    try:
        return Priority(priority)
    except ValueError:
        raise ValidationError("Priority must be Low, Medium, or High")


def validate_due_date(due_date) -> str | None:
    """
    Accepts an ISO-8601 date ("2025-03-01") or datetime
    ("2025-03-01T09:30:00Z"); returns it trimmed, or None when empty.
    """
    if due_date is None or (isinstance(due_date, str) and not due_date.strip()):
        return None
    if not isinstance(due_date, str):
        raise ValidationError("Invalid due date format")
    value = due_date.strip()
    try:
        date.fromisoformat(value)
        return value
    except ValueError:
        pass
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError("Invalid due date format")
    return value


class TaskService:
    """
    Owner-scoped task operations. Every method takes the caller's user id;
    tasks owned by anyone else behave as if they did not exist.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def _load(self, records: list[dict]) -> list[Task]:
        tasks = []
        for record in records:
            try:
                tasks.append(Task.model_validate(record))
            except PydanticValidationError:
                logger.warning("Skipping malformed task record id=%s", record.get("id"))
        return tasks

    @staticmethod
    def _index_of(records: list[dict], user_id: str, task_id: str) -> int:
        for i, record in enumerate(records):
            if record.get("id") == task_id and record.get("userId") == user_id:
                return i
        raise NotFoundError()

    def list(self, user_id: str) -> list[Task]:
        return self._load(self.store.filter("tasks", userId=user_id))

    def get(self, user_id: str, task_id: str) -> Task:
        record = self.store.find("tasks", id=task_id, userId=user_id)
        tasks = self._load([record]) if record is not None else []
        if not tasks:
            raise NotFoundError()
        return tasks[0]

    def create(self, user_id: str, title, description=None, priority=None, due_date=None) -> Task:
        now = utc_now()
        task = Task(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=validate_title(title),
            description=validate_description(description),
            priority=validate_priority(priority),
            due_date=validate_due_date(due_date),
            created_at=now,
            updated_at=now,
        )
        with self.store.lock("tasks"):
            records = self.store.read_all("tasks")
            records.append(task.to_record())
            self.store.write_all("tasks", records)

        logger.info("Task created id=%s user=%s", task.id, user_id)
        return task

    def update(self, user_id: str, task_id: str, fields: dict) -> Task:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        changes = {}
        if "title" in fields:
            changes["title"] = validate_title(fields["title"])
        if "description" in fields:
            changes["description"] = validate_description(fields["description"])
        if "priority" in fields:
            changes["priority"] = validate_priority(fields["priority"])
        if "due_date" in fields:
            changes["due_date"] = validate_due_date(fields["due_date"])
        if "is_completed" in fields:
            if not isinstance(fields["is_completed"], bool):
                raise ValidationError("isCompleted must be a boolean")
            changes["is_completed"] = fields["is_completed"]

        with self.store.lock("tasks"):
            records = self.store.read_all("tasks")
            i = self._index_of(records, user_id, task_id)
            current = self._load([records[i]])
            if not current:
                raise NotFoundError()
            task = current[0].model_copy(update={**changes, "updated_at": utc_now()})
            records[i] = task.to_record()
            self.store.write_all("tasks", records)

        logger.info("Task updated id=%s fields=%s", task_id, sorted(changes))
        return task

    def delete(self, user_id: str, task_id: str) -> None:
        with self.store.lock("tasks"):
            records = self.store.read_all("tasks")
            i = self._index_of(records, user_id, task_id)
            del records[i]
            self.store.write_all("tasks", records)
        logger.info("Task deleted id=%s user=%s", task_id, user_id)

    def toggle_completion(self, user_id: str, task_id: str) -> Task:
        with self.store.lock("tasks"):
            records = self.store.read_all("tasks")
            i = self._index_of(records, user_id, task_id)
            current = self._load([records[i]])
            if not current:
                raise NotFoundError()
            task = current[0].model_copy(
                update={"is_completed": not current[0].is_completed, "updated_at": utc_now()}
            )
            records[i] = task.to_record()
            self.store.write_all("tasks", records)

        logger.info("Task %s marked %s", task_id, "completed" if task.is_completed else "incomplete")
        return task

    def stats(self, user_id: str) -> dict:
        tasks = self.list(user_id)
        completed = sum(1 for t in tasks if t.is_completed)
        return {
            "total": len(tasks),
            "completed": completed,
            "pending": len(tasks) - completed,
            "low": sum(1 for t in tasks if t.priority == Priority.LOW),
            "medium": sum(1 for t in tasks if t.priority == Priority.MEDIUM),
            "high": sum(1 for t in tasks if t.priority == Priority.HIGH),
        }
