# task_manager/core/errors.py


class TaskManagerError(Exception):
    """
    Base class for errors that are reported to the HTTP caller as
    {"success": false, "message": ..., "code": ...}.
    """
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, code: str | None = None):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)


class ValidationError(TaskManagerError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class DuplicateUserError(TaskManagerError):
    status_code = 409
    code = "USER_EXISTS"
    default_message = "User with this email already exists"


class InvalidCredentialsError(TaskManagerError):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class NotAuthenticatedError(TaskManagerError):
    status_code = 401
    code = "NOT_AUTHENTICATED"
    default_message = "Not authenticated"


class NotFoundError(TaskManagerError):
    status_code = 404
    code = "TASK_NOT_FOUND"
    default_message = "Task not found"


class StoreError(TaskManagerError):
    status_code = 500
    code = "STORE_ERROR"
    default_message = "Failed to access the data store"
