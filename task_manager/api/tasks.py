# task_manager/api/tasks.py

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from fastapi import APIRouter, Depends, Request
from task_manager.core.tasks import TaskService
from task_manager.models.user import User
from task_manager.api.auth import require_user


router = APIRouter(prefix="/api/tasks", tags=["tasks"])


class TaskCreateRequest(BaseModel):
    """
    Request schema for creating a task. Every field is optional here so
    that missing values are reported by the task service with its own
    messages.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = None
    description: str | None = None
    priority: str | None = None
    due_date: str | None = None


class TaskUpdateRequest(BaseModel):
    """
    Partial update. Only the fields present in the request body are applied.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = None
    description: str | None = None
    priority: str | None = None
    due_date: str | None = None
    is_completed: bool | None = None


def get_task_service(request: Request) -> TaskService:
    return request.app.state.task_service


# -------------------------------
# Task Endpoints
# -------------------------------

@router.get("")
def list_tasks(user: User = Depends(require_user), tasks: TaskService = Depends(get_task_service)):
    """
    Lists the caller's tasks in insertion order.
    """
    items = [t.to_record() for t in tasks.list(user.id)]
    return {"success": True, "tasks": items, "count": len(items)}


@router.get("/stats")
def task_stats(user: User = Depends(require_user), tasks: TaskService = Depends(get_task_service)):
    return {"success": True, "stats": tasks.stats(user.id)}


@router.get("/{task_id}")
def get_task(task_id: str, user: User = Depends(require_user), tasks: TaskService = Depends(get_task_service)):
    return {"success": True, "task": tasks.get(user.id, task_id).to_record()}


@router.post("", status_code=201)
def create_task(
    req: TaskCreateRequest,
    user: User = Depends(require_user),
    tasks: TaskService = Depends(get_task_service),
):
    task = tasks.create(
        user.id,
        title=req.title,
        description=req.description,
        priority=req.priority,
        due_date=req.due_date,
    )
    return {"success": True, "message": "Task created successfully", "task": task.to_record()}


@router.put("/{task_id}")
def update_task(
    task_id: str,
    req: TaskUpdateRequest,
    user: User = Depends(require_user),
    tasks: TaskService = Depends(get_task_service),
):
    """
    Applies only the fields sent by the client; `dueDate: null` clears the
    due date.
    """
    task = tasks.update(user.id, task_id, req.model_dump(exclude_unset=True))
    return {"success": True, "message": "Task updated successfully", "task": task.to_record()}


@router.delete("/{task_id}")
def delete_task(task_id: str, user: User = Depends(require_user), tasks: TaskService = Depends(get_task_service)):
    tasks.delete(user.id, task_id)
    return {"success": True, "message": "Task deleted successfully"}


@router.patch("/{task_id}/toggle")
def toggle_task(task_id: str, user: User = Depends(require_user), tasks: TaskService = Depends(get_task_service)):
    task = tasks.toggle_completion(user.id, task_id)
    state = "completed" if task.is_completed else "incomplete"
    return {"success": True, "message": f"Task marked as {state}", "task": task.to_record()}
