"""Per-account portfolio configuration (lazy, idempotent provisioning)."""

from __future__ import annotations

import copy
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from portfolio_api.db.models import PortfolioConfig
from portfolio_api.domain.errors import InvalidContentError, NotFoundError
from portfolio_api.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

DEFAULT_SECTION_ORDER = [
    {"id": "profile", "type": "profile", "order": 1, "isVisible": True, "layout": "default"},
    {"id": "experiences", "type": "experiences", "order": 2, "isVisible": True, "layout": "default"},
    {"id": "skills", "type": "skills", "order": 3, "isVisible": True, "layout": "default"},
]

DEFAULT_STYLE = {
    "layout_type": "default",
    "theme": "light",
    "primary_color": "#3b82f6",
    "font_family": "Inter",
    "spacing": "comfortable",
    "show_profile_image": True,
    "show_social_links": True,
    "show_contact_info": True,
    "custom_css": None,
    "animations_enabled": True,
}

SECTION_TYPES = {"profile", "experiences", "skills", "custom"}
CONFIG_FIELDS = set(DEFAULT_STYLE) | {"section_order"}
NULLABLE_FIELDS = {"custom_css"}


def default_config_values() -> dict:
    values = copy.deepcopy(DEFAULT_STYLE)
    values["section_order"] = copy.deepcopy(DEFAULT_SECTION_ORDER)
    return values


def _validate_section_order(items) -> list[dict]:
    if not isinstance(items, list):
        raise InvalidContentError("sectionOrder must be a list")
    cleaned = []
    for item in items:
        if not isinstance(item, dict):
            raise InvalidContentError("sectionOrder entries must be objects")
        if item.get("type") not in SECTION_TYPES:
            raise InvalidContentError(f"Unknown section type: {item.get('type')!r}")
        if not item.get("id") or not isinstance(item.get("order"), int):
            raise InvalidContentError("sectionOrder entries need an id and an integer order")
        cleaned.append(dict(item))
    return sorted(cleaned, key=lambda entry: entry["order"])


class ConfigurationService:
    def __init__(self, repository: SQLRepository):
        self.repository = repository

    def get(self, account_id: str) -> Optional[PortfolioConfig]:
        return self.repository.get_config(account_id)

    def ensure(self, account_id: str) -> PortfolioConfig:
        """Return the account's configuration, creating the default one if absent.

        A concurrent caller that wins the create race makes our insert fail on
        the unique ``user_id``; the winner's row is then re-read.
        """
        existing = self.repository.get_config(account_id)
        if existing:
            return existing
        try:
            created = self.repository.create_config(account_id, default_config_values())
            logger.info("Provisioned default configuration", extra={"account_id": account_id})
            return created
        except IntegrityError:
            winner = self.repository.get_config(account_id)
            if winner is None:
                raise
            return winner

    def update(self, account_id: str, patch: dict) -> PortfolioConfig:
        """Apply the fields present in ``patch``; provisions the default row first when missing."""
        values = {
            key: value
            for key, value in (patch or {}).items()
            if key in CONFIG_FIELDS and (value is not None or key in NULLABLE_FIELDS)
        }
        if "section_order" in values:
            values["section_order"] = _validate_section_order(values["section_order"])
        current = self.ensure(account_id)
        if not values:
            return current
        updated = self.repository.update_config(account_id, values)
        if updated is None:
            raise NotFoundError("Configuration not found")
        return updated
