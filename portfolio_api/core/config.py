"""
Configuration helpers for the portfolio backend.

Settings are read once from environment variables so that routers/services
never fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    public_base_url: str
    session_ttl_seconds: int
    allocation_max_attempts: int
    log_level: str
    log_format: str
    system_account_email: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    app_env = (os.getenv("APP_ENV") or "dev").lower()
    return Settings(
        app_env=app_env,
        database_url=(os.getenv("DATABASE_URL") or "").strip(),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS", "86400"), 86400),
        allocation_max_attempts=max(1, _int(os.getenv("ALLOCATION_MAX_ATTEMPTS", "5"), 5)),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        log_format=(os.getenv("LOG_FORMAT") or ("json" if app_env == "prod" else "text")).lower(),
        system_account_email=(os.getenv("SYSTEM_ACCOUNT_EMAIL") or "templates@system.local").strip().lower(),
    )
