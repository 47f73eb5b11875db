# task_manager/main.py

import time
import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from task_manager import __version__
from task_manager.api import auth, tasks
from task_manager.config import Settings
from task_manager.core.auth import AuthService
from task_manager.core.errors import TaskManagerError
from task_manager.core.sessions import SessionStore
from task_manager.core.tasks import TaskService
from task_manager.database import RecordStore


logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


def error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "code": code},
    )


# -------------------------------
# Exception Handlers
# -------------------------------

async def handle_app_error(request: Request, exc: TaskManagerError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    return error_response(exc.status_code, exc.message, exc.code)


async def handle_request_validation(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return error_response(400, message, "VALIDATION_ERROR")


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_response(404, "Route not found", "ROUTE_NOT_FOUND")
    return error_response(exc.status_code, str(exc.detail), "HTTP_ERROR")


async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error", "INTERNAL_ERROR")


# -------------------------------
# App Factory
# -------------------------------

def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Builds the API with one store, one session store and one instance of
    each service, shared by all requests through app.state.
    """
    settings = settings or Settings.from_env()

    app = FastAPI(title="Task Manager API", version=__version__)

    store = RecordStore(settings.data_dir)
    sessions = SessionStore(max_age=settings.session_max_age)
    app.state.settings = settings
    app.state.store = store
    app.state.sessions = sessions
    app.state.auth_service = AuthService(store, sessions, bcrypt_rounds=settings.bcrypt_rounds)
    app.state.task_service = TaskService(store)

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        max_age=86400,
    )

    @app.middleware("http")
    async def log_and_harden(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s - %s - %.0fms", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    app.add_exception_handler(TaskManagerError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)

    @app.get("/")
    def root():
        return {
            "success": True,
            "message": "Task Manager API is running",
            "version": __version__,
            "environment": settings.app_env,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    app.include_router(auth.router)
    app.include_router(tasks.router)

    logger.info(
        "Task Manager API ready env=%s data_dir=%s origins=%s",
        settings.app_env, settings.data_dir, ",".join(settings.allowed_origins),
    )
    return app


app = create_app()
