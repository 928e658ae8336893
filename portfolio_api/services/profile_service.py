"""Profile fields, visibility and the public portfolio slug."""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError

from portfolio_api.db.models import Account, ContentSection, Experience, Skill
from portfolio_api.domain.errors import InvalidSlugError, NotFoundError, SlugUnavailableError
from portfolio_api.domain.slugs import is_valid_slug
from portfolio_api.repositories.sql_repository import SQLRepository

PROFILE_FIELDS = {
    "first_name",
    "last_name",
    "bio",
    "phone",
    "location",
    "linkedin_url",
    "github_url",
    "website_url",
    "avatar_url",
}
REQUIRED_PROFILE_FIELDS = {"first_name", "last_name"}


@dataclass
class PublicPortfolio:
    account: Account
    sections: list[ContentSection] = field(default_factory=list)
    experiences: list[Experience] = field(default_factory=list)
    skills: list[Skill] = field(default_factory=list)


class ProfileService:
    def __init__(self, repository: SQLRepository):
        self.repository = repository

    def _require(self, account: Account | None) -> Account:
        if account is None:
            raise NotFoundError("Account not found")
        return account

    def update_profile(self, account_id: str, patch: dict) -> Account:
        values = {
            key: value
            for key, value in (patch or {}).items()
            if key in PROFILE_FIELDS and not (value is None and key in REQUIRED_PROFILE_FIELDS)
        }
        if not values:
            return self._require(self.repository.get_account(account_id))
        return self._require(self.repository.update_account(account_id, values))

    def set_visibility(self, account_id: str, is_public: bool) -> Account:
        return self._require(self.repository.update_account(account_id, {"is_public": bool(is_public)}))

    def change_portfolio_slug(self, account_id: str, slug: str) -> Account:
        candidate = (slug or "").strip().lower()
        if not is_valid_slug(candidate):
            raise InvalidSlugError("Invalid slug. Use 3-30 characters [a-z0-9-]")
        account = self._require(self.repository.get_account(account_id))
        if candidate == account.portfolio_slug:
            return account
        if self.repository.portfolio_slug_exists(candidate, exclude_account_id=account_id):
            raise SlugUnavailableError("Slug unavailable, try another")
        try:
            return self._require(self.repository.update_account(account_id, {"portfolio_slug": candidate}))
        except IntegrityError as exc:
            raise SlugUnavailableError("Slug unavailable, try another") from exc

    def get_public_portfolio(self, slug: str) -> PublicPortfolio:
        account = self.repository.get_account_by_portfolio_slug((slug or "").strip().lower())
        # Private and missing portfolios look the same from outside.
        if account is None or not account.is_public:
            raise NotFoundError("Portfolio not found")
        return PublicPortfolio(
            account=account,
            sections=self.repository.list_sections(account.id, public_only=True),
            experiences=self.repository.list_experiences(account.id),
            skills=self.repository.list_skills(account.id),
        )
