# task_manager/models/task.py

from enum import Enum
from pydantic import Field
from . import Record, utc_now


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Task(Record):
    id: str
    user_id: str
    title: str
    description: str = ""
    priority: Priority
    is_completed: bool = False
    due_date: str | None = None
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)
