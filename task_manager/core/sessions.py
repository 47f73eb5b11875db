# task_manager/core/sessions.py

import time
import secrets
import logging
from dataclasses import dataclass, replace
from threading import Lock
from jose import JWTError, jwt


logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


@dataclass(frozen=True)
class Session:
    id: str
    user_id: str | None
    authenticated: bool
    expires_at: float

    def is_expired(self, now: float | None = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at


class SessionStore:
    """
    In-memory server-side sessions keyed by an opaque random id.

    Expiry is rolling: touch() pushes expires_at max_age seconds into the
    future. Expired entries are dropped on lookup and by purge_expired().
    """

    def __init__(self, max_age: int = 24 * 60 * 60):
        self.max_age = max_age
        self._sessions: dict[str, Session] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self, user_id: str) -> Session:
        self.purge_expired()
        session = Session(
            id=secrets.token_urlsafe(32),
            user_id=user_id,
            authenticated=True,
            expires_at=time.time() + self.max_age,
        )
        with self._lock:
            self._sessions[session.id] = session
        return session

    def get(self, session_id: str | None) -> Session | None:
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.is_expired():
                del self._sessions[session_id]
                return None
            return session

    def touch(self, session: Session) -> Session:
        renewed = replace(session, expires_at=time.time() + self.max_age)
        with self._lock:
            if session.id not in self._sessions:
                return session
            self._sessions[session.id] = renewed
        return renewed

    def destroy(self, session_id: str | None) -> bool:
        if not session_id:
            return False
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def purge_expired(self) -> int:
        now = time.time()
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.debug("Purged %d expired session(s)", len(expired))
        return len(expired)


def sign_session_id(session_id: str, secret: str) -> str:
    return jwt.encode({"sid": session_id}, secret, algorithm=ALGORITHM)


def unsign_session_id(token: str | None, secret: str) -> str | None:
    if not token:
        return None
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) else None
