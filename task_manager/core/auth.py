# task_manager/core/auth.py

import re
import uuid
import secrets
import logging
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError
from task_manager.database import RecordStore
from task_manager.models import utc_now
from task_manager.models.user import User
from task_manager.core.sessions import Session, SessionStore
from task_manager.core.errors import (
    ValidationError,
    DuplicateUserError,
    InvalidCredentialsError,
    NotAuthenticatedError,
)


logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


class AuthService:
    """
    Signup, login, logout and current-user lookup on top of the users
    collection and the session store.
    """

    def __init__(self, store: RecordStore, sessions: SessionStore, bcrypt_rounds: int = 12):
        self.store = store
        self.sessions = sessions
        self.pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=bcrypt_rounds
        )
        # Verified against when the email is unknown, so both failure paths cost one hash check.
        self._dummy_hash = self.pwd_context.hash(secrets.token_urlsafe(16))

    def get_password_hash(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        try:
            return self.pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            logger.warning("Stored password hash is not a recognised bcrypt hash")
            return False

    def _load_user(self, record: dict | None) -> User | None:
        if record is None:
            return None
        try:
            return User.model_validate(record)
        except PydanticValidationError:
            logger.warning("Skipping malformed user record id=%s", record.get("id"))
            return None

    def get_user_by_email(self, email: str) -> User | None:
        return self._load_user(self.store.find("users", emailAddress=normalize_email(email)))

    def get_user_by_id(self, user_id: str) -> User | None:
        return self._load_user(self.store.find("users", id=user_id))

    def _start_session(self, user: User, previous: Session | None) -> Session:
        if previous is not None:
            self.sessions.destroy(previous.id)
        return self.sessions.create(user.id)

    # -------------------------------
    # Operations
    # -------------------------------

    def signup(self, first_name, last_name, email, password, session: Session | None = None) -> tuple[User, Session]:
        first_name, last_name, email = _text(first_name), _text(last_name), _text(email)
        password = password if isinstance(password, str) else ""

        if not first_name or not last_name or not email or not password:
            raise ValidationError("All user fields are required")
        if len(first_name) < MIN_NAME_LENGTH:
            raise ValidationError("First name must be at least 2 characters")
        if len(last_name) < MIN_NAME_LENGTH:
            raise ValidationError("Last name must be at least 2 characters")
        if not EMAIL_RE.match(email):
            raise ValidationError("Invalid email format")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError("Password must be at least 6 characters")

        email = normalize_email(email)
        if self.get_user_by_email(email) is not None:
            raise DuplicateUserError()

        hashed = self.get_password_hash(password)
        now = utc_now()
        user = User(
            id=str(uuid.uuid4()),
            first_name=first_name,
            last_name=last_name,
            email_address=email,
            password=hashed,
            created_at=now,
            updated_at=now,
        )

        with self.store.lock("users"):
            users = self.store.read_all("users")
            if any(u.get("emailAddress") == email for u in users):
                raise DuplicateUserError()
            users.append(user.to_record())
            self.store.write_all("users", users)

        logger.info("User created id=%s", user.id)
        return user, self._start_session(user, session)

    def login(self, email, password, session: Session | None = None) -> tuple[User, Session]:
        email = _text(email)
        if not email or not isinstance(password, str) or not password:
            raise ValidationError("Email and password are required")

        user = self.get_user_by_email(email)
        if user is None:
            self.verify_password(password, self._dummy_hash)
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError()
        if not self.verify_password(password, user.password):
            logger.info("Login failed: bad password for user id=%s", user.id)
            raise InvalidCredentialsError()

        logger.info("User logged in id=%s", user.id)
        return user, self._start_session(user, session)

    def logout(self, session: Session | None) -> None:
        if session is not None and self.sessions.destroy(session.id):
            logger.info("User logged out id=%s", session.user_id)

    def get_current_user(self, session: Session | None) -> User:
        if session is None or not session.authenticated or not session.user_id:
            raise NotAuthenticatedError()

        user = self.get_user_by_id(session.user_id)
        if user is None:
            logger.info("Dropping session for missing user id=%s", session.user_id)
            self.sessions.destroy(session.id)
            raise NotAuthenticatedError()
        return user
