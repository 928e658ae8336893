"""Experiences and skills, each mutation checked against the requesting owner."""

from __future__ import annotations

from typing import Callable, Optional

from portfolio_api.db.models import Experience, Skill
from portfolio_api.domain.errors import InvalidContentError, OwnershipDeniedError
from portfolio_api.repositories.sql_repository import SQLRepository

EXPERIENCE_FIELDS = {"title", "company_name", "description", "start_date", "end_date", "is_current", "location"}
SKILL_FIELDS = {"name", "description", "category", "proficiency", "years_of_experience"}
NULLABLE_EXPERIENCE = {"end_date", "location"}
NULLABLE_SKILL = {"category", "proficiency", "years_of_experience"}


def _pick(data: dict, allowed: set[str], nullable: set[str]) -> dict:
    return {
        key: value
        for key, value in (data or {}).items()
        if key in allowed and (value is not None or key in nullable)
    }


class RecordService:
    def __init__(self, repository: SQLRepository):
        self.repository = repository

    def _check_owner(self, load: Callable[[str], Optional[object]], record_id: str, owner_id: str):
        # Explicit load-then-compare: never rely on the delete/update filter alone.
        record = load(record_id)
        if record is None or getattr(record, "user_id", None) != owner_id:
            raise OwnershipDeniedError("Record not found for this account")
        return record

    # -------------------------------------- experiences --------------------------------------
    def list_experiences(self, owner_id: str) -> list[Experience]:
        return self.repository.list_experiences(owner_id)

    def create_experience(self, owner_id: str, data: dict) -> Experience:
        values = _pick(data, EXPERIENCE_FIELDS, NULLABLE_EXPERIENCE)
        missing = [name for name in ("title", "company_name", "start_date") if not values.get(name)]
        if missing:
            raise InvalidContentError(f"Missing required field(s): {', '.join(missing)}")
        if values.get("is_current"):
            values["end_date"] = None
        return self.repository.create_experience(owner_id, values)

    def update_experience(self, experience_id: str, owner_id: str, patch: dict) -> Experience:
        self._check_owner(self.repository.get_experience, experience_id, owner_id)
        values = _pick(patch, EXPERIENCE_FIELDS, NULLABLE_EXPERIENCE)
        if values.get("is_current"):
            values["end_date"] = None
        updated = self.repository.update_experience(experience_id, values)
        if updated is None:
            raise OwnershipDeniedError("Record not found for this account")
        return updated

    def delete_experience(self, experience_id: str, owner_id: str) -> None:
        self._check_owner(self.repository.get_experience, experience_id, owner_id)
        self.repository.delete_experience(experience_id)

    # -------------------------------------- skills --------------------------------------
    def list_skills(self, owner_id: str) -> list[Skill]:
        return self.repository.list_skills(owner_id)

    def create_skill(self, owner_id: str, data: dict) -> Skill:
        values = _pick(data, SKILL_FIELDS, NULLABLE_SKILL)
        if not (values.get("name") or "").strip():
            raise InvalidContentError("Missing required field(s): name")
        return self.repository.create_skill(owner_id, values)

    def update_skill(self, skill_id: str, owner_id: str, patch: dict) -> Skill:
        self._check_owner(self.repository.get_skill, skill_id, owner_id)
        updated = self.repository.update_skill(skill_id, _pick(patch, SKILL_FIELDS, NULLABLE_SKILL))
        if updated is None:
            raise OwnershipDeniedError("Record not found for this account")
        return updated

    def delete_skill(self, skill_id: str, owner_id: str) -> None:
        self._check_owner(self.repository.get_skill, skill_id, owner_id)
        self.repository.delete_skill(skill_id)
