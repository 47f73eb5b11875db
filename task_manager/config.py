# task_manager/config.py

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv


load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_SESSION_SECRET = "fallback-secret-key-change-in-production"
DEFAULT_ORIGINS = ["http://localhost:3000", "http://localhost:8000"]


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", name, raw, default)
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


@dataclass(frozen=True)
class Settings:
    """
    Process-wide settings, read once from the environment (and .env).
    """
    app_env: str = "development"
    host: str = "127.0.0.1"
    port: int = 8000
    data_dir: Path = Path("data")

    session_secret: str = DEFAULT_SESSION_SECRET
    session_name: str = "task-manager-session"
    session_max_age: int = 24 * 60 * 60

    allowed_origins: list[str] = field(default_factory=lambda: list(DEFAULT_ORIGINS))
    bcrypt_rounds: int = 12

    log_level: str = "INFO"
    log_dir: Path | None = None

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def cookie_samesite(self) -> str:
        # Cross-site frontends only receive the cookie with SameSite=None.
        return "none" if self.is_production else "lax"

    @property
    def cookie_secure(self) -> bool:
        return self.is_production

    @classmethod
    def from_env(cls) -> "Settings":
        log_dir = os.getenv("LOG_DIR")
        settings = cls(
            app_env=os.getenv("APP_ENV", "development").strip().lower(),
            host=os.getenv("HOST", "127.0.0.1"),
            port=_env_int("PORT", 8000),
            data_dir=Path(os.getenv("DATA_DIR", "data")).expanduser(),
            session_secret=os.getenv("SESSION_SECRET") or DEFAULT_SESSION_SECRET,
            session_name=os.getenv("SESSION_NAME", "task-manager-session"),
            session_max_age=_env_int("SESSION_MAX_AGE", 24 * 60 * 60),
            allowed_origins=_env_list("ALLOWED_ORIGINS", DEFAULT_ORIGINS),
            bcrypt_rounds=min(max(_env_int("BCRYPT_ROUNDS", 12), 4), 31),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_dir=Path(log_dir).expanduser() if log_dir else None,
        )
        if settings.session_secret == DEFAULT_SESSION_SECRET:
            logger.warning("SESSION_SECRET is not set; using the insecure development fallback")
        return settings
