# task_manager/api/auth.py

import logging
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from fastapi import APIRouter, Depends, Request, Response
from task_manager.config import Settings
from task_manager.core.auth import AuthService
from task_manager.core.errors import NotAuthenticatedError
from task_manager.core.sessions import Session, sign_session_id, unsign_session_id
from task_manager.models.user import User


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class SignupRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str | None = None
    last_name: str | None = None
    email_address: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email_address: str | None = None
    password: str | None = None


# -------------------------------
# Dependencies
# -------------------------------

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_session(request: Request, settings: Settings = Depends(get_settings)) -> Session | None:
    """
    Resolves the session cookie to a live server-side session, or None.
    """
    session_id = unsign_session_id(request.cookies.get(settings.session_name), settings.session_secret)
    return request.app.state.sessions.get(session_id)


def set_session_cookie(response: Response, settings: Settings, session: Session) -> None:
    response.set_cookie(
        key=settings.session_name,
        value=sign_session_id(session.id, settings.session_secret),
        max_age=settings.session_max_age,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


def require_user(
    request: Request,
    response: Response,
    session: Session | None = Depends(get_session),
    settings: Settings = Depends(get_settings),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """
    Authentication gate for protected routes. Renews the session expiry and
    re-issues the cookie on every successful request.
    """
    if session is None or not session.authenticated:
        raise NotAuthenticatedError("Authentication required. Please log in.", code="AUTH_REQUIRED")
    user = auth.get_current_user(session)
    renewed = request.app.state.sessions.touch(session)
    set_session_cookie(response, settings, renewed)
    return user


# -------------------------------
# Endpoints
# -------------------------------

@router.post("/signup", status_code=201)
def signup(
    req: SignupRequest,
    response: Response,
    session: Session | None = Depends(get_session),
    settings: Settings = Depends(get_settings),
    auth: AuthService = Depends(get_auth_service),
):
    user, new_session = auth.signup(
        req.first_name, req.last_name, req.email_address, req.password, session=session
    )
    set_session_cookie(response, settings, new_session)
    return {"success": True, "message": "User registered successfully", "user": user.public()}


@router.post("/login")
def login(
    req: LoginRequest,
    response: Response,
    session: Session | None = Depends(get_session),
    settings: Settings = Depends(get_settings),
    auth: AuthService = Depends(get_auth_service),
):
    user, new_session = auth.login(req.email_address, req.password, session=session)
    set_session_cookie(response, settings, new_session)
    return {"success": True, "message": "Login successful", "user": user.public()}


@router.post("/logout")
def logout(
    response: Response,
    session: Session | None = Depends(get_session),
    settings: Settings = Depends(get_settings),
    auth: AuthService = Depends(get_auth_service),
):
    auth.logout(session)
    clear_session_cookie(response, settings)
    return {"success": True, "message": "Logout successful"}


@router.get("/me")
def read_users_me(
    session: Session | None = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
):
    user = auth.get_current_user(session)
    return {"success": True, "user": user.public(), "isAuthenticated": True}


@router.get("/health")
def health_check(settings: Settings = Depends(get_settings)):
    return {
        "success": True,
        "message": "Task Manager API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.app_env,
    }
