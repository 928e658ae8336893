"""Session helpers (issue tokens, cookies, validation)."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request, Response

from portfolio_api.core.config import Settings
from portfolio_api.repositories.sql_repository import SQLRepository

SESSION_COOKIE_NAME = "session"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SessionService:
    def __init__(self, repository: SQLRepository, settings: Settings):
        self.repository = repository
        self.settings = settings

    def issue(self, account_id: str) -> str:
        """Create a new session token for the account."""
        ttl = max(60, self.settings.session_ttl_seconds)
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl)
        return self.repository.create_user_session(account_id, expires_at)

    def account_id_for(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        entity = self.repository.get_user_session(token)
        if not entity:
            return None
        if entity.expires_at and _as_utc(entity.expires_at) < datetime.now(timezone.utc):
            self.repository.delete_user_session(token)
            return None
        return entity.user_id

    def current_account_id(self, request: Request) -> Optional[str]:
        """Return the account id bound to the request's session cookie, if any."""
        return self.account_id_for(request.cookies.get(SESSION_COOKIE_NAME))

    def revoke(self, token: Optional[str]) -> None:
        if token:
            self.repository.delete_user_session(token)

    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            SESSION_COOKIE_NAME,
            token,
            httponly=True,
            secure=self.settings.app_env == "prod",
            samesite="strict",
            max_age=self.settings.session_ttl_seconds,
            path="/",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(SESSION_COOKIE_NAME, path="/")
