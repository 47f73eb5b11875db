# task_manager_client/__init__.py

from .api import API_URL, ApiError, TaskManagerClient

__all__ = ["API_URL", "ApiError", "TaskManagerClient"]
