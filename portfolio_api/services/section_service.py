"""Ownership-scoped management of user-authored content sections."""

from __future__ import annotations

import copy
import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError

from portfolio_api.db.models import ContentSection
from portfolio_api.domain import section_content
from portfolio_api.domain.errors import (
    InvalidContentError,
    NotFoundError,
    OwnershipDeniedError,
    SlugUnavailableError,
)
from portfolio_api.domain.slugs import slugify
from portfolio_api.repositories.sql_repository import SQLRepository
from portfolio_api.services.allocator import IdentifierAllocator

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"title", "slug", "description", "is_public", "order", "layout", "content"}
NULLABLE_FIELDS = {"description"}
NOT_OWNED = "Section not found for this account"


class ContentSectionService:
    """Every operation takes the requesting owner's id explicitly."""

    def __init__(
        self,
        repository: SQLRepository,
        allocator: IdentifierAllocator,
        template_owner_email: str | None = None,
    ):
        self.repository = repository
        self.allocator = allocator
        self.template_owner_email = (template_owner_email or "").strip().lower()

    # -------------------------------------- helpers --------------------------------------
    def _slug_scope(self, owner_id: str, exclude_section_id: str | None = None):
        def exists(candidate: str) -> bool:
            return self.repository.section_slug_exists(owner_id, candidate, exclude_section_id)

        return exists

    def _next_order(self, owner_id: str) -> int:
        current = self.repository.max_section_order(owner_id)
        return (current or 0) + 1

    def _template_owner_id(self, owner_id: str) -> Optional[str]:
        """Id of the account whose public sections serve as templates, if any."""
        if not self.template_owner_email:
            return None
        account = self.repository.get_account_by_email(self.template_owner_email)
        if account is None or account.id == owner_id:
            return None
        return account.id

    def _owned(self, section_id: str, owner_id: str) -> ContentSection:
        section = self.repository.get_section(section_id)
        if section is None or section.user_id != owner_id:
            raise OwnershipDeniedError(NOT_OWNED)
        return section

    def _insert_with_slug(self, owner_id: str, values: dict, requested_slug: str | None, seed: str) -> ContentSection:
        def insert(slug: str) -> ContentSection:
            return self.repository.create_section(owner_id, {**values, "slug": slug})

        if requested_slug:
            slug = slugify(requested_slug)
            if self.repository.section_slug_exists(owner_id, slug):
                raise SlugUnavailableError(f"Slug '{slug}' is already used by another section")
            try:
                return insert(slug)
            except IntegrityError as exc:
                raise SlugUnavailableError(f"Slug '{slug}' is already used by another section") from exc
        return self.allocator.allocate_and_insert(seed, self._slug_scope(owner_id), insert)

    # -------------------------------------- reads --------------------------------------
    def list(self, owner_id: str) -> list[ContentSection]:
        return self.repository.list_sections(owner_id)

    def list_public(self, owner_id: str) -> list[ContentSection]:
        return self.repository.list_sections(owner_id, public_only=True)

    def get(self, section_id: str, owner_id: str) -> ContentSection:
        return self._owned(section_id, owner_id)

    def template_types(self, owner_id: str) -> list[str]:
        template_owner_id = self._template_owner_id(owner_id)
        if template_owner_id is None:
            return []
        return self.repository.list_template_types(template_owner_id)

    # -------------------------------------- mutations --------------------------------------
    def create(self, owner_id: str, data: dict) -> ContentSection:
        """Create a section; slug and order are derived when not supplied."""
        title = (data.get("title") or "").strip()
        if not title:
            raise InvalidContentError("Title is required")
        section_type = (data.get("type") or "custom").strip()
        content = section_content.parse_content(section_type, data.get("content")).dump()
        order = data.get("order")
        values = {
            "title": title,
            "type": section_type,
            "description": data.get("description"),
            "is_public": (
                section_content.is_public_of(content) if data.get("is_public") is None else bool(data["is_public"])
            ),
            "order": self._next_order(owner_id) if order is None else int(order),
            "layout": data.get("layout") or section_content.layout_of(content),
            "content": content,
        }
        section = self._insert_with_slug(owner_id, values, data.get("slug"), title)
        logger.info("Created section %s", section.slug, extra={"account_id": owner_id, "section_id": section.id})
        return section

    def update(self, section_id: str, owner_id: str, patch: dict) -> ContentSection:
        """Apply the fields present in ``patch``; absent fields are left untouched."""
        section = self._owned(section_id, owner_id)
        values = {
            key: value
            for key, value in (patch or {}).items()
            if key in UPDATABLE_FIELDS and (value is not None or key in NULLABLE_FIELDS)
        }
        if "title" in values:
            values["title"] = values["title"].strip()
            if not values["title"]:
                raise InvalidContentError("Title is required")
        if "slug" in values:
            values["slug"] = slugify(values["slug"])
            if values["slug"] != section.slug and self.repository.section_slug_exists(
                owner_id, values["slug"], exclude_section_id=section_id
            ):
                raise SlugUnavailableError(f"Slug '{values['slug']}' is already used by another section")
        if "content" in values:
            values["content"] = section_content.parse_content(section.type, values["content"]).dump()
        if not values:
            return section
        try:
            updated = self.repository.update_owned_section(section_id, owner_id, values)
        except IntegrityError as exc:
            raise SlugUnavailableError("Slug is already used by another section") from exc
        if updated is None:
            raise OwnershipDeniedError(NOT_OWNED)
        return updated

    def delete(self, section_id: str, owner_id: str) -> ContentSection:
        section = self._owned(section_id, owner_id)
        if not self.repository.delete_owned_section(section_id, owner_id):
            raise OwnershipDeniedError(NOT_OWNED)
        logger.info("Deleted section %s", section.slug, extra={"account_id": owner_id, "section_id": section_id})
        return section

    def reorder(self, owner_id: str, items: Iterable) -> list[ContentSection]:
        """Set the order of several sections at once, all or nothing.

        ``items`` holds ``(id, order)`` pairs or ``{"id", "order"}`` mappings.
        A single id not owned by ``owner_id`` rejects the whole batch.
        """
        orders: dict[str, int] = {}
        for item in items:
            if isinstance(item, dict):
                section_id, order = item.get("id"), item.get("order")
            else:
                section_id, order = item
            if not section_id or order is None:
                raise InvalidContentError("Each reorder item needs an id and an order")
            orders[str(section_id)] = int(order)
        if orders and not self.repository.reorder_owned_sections(owner_id, orders):
            raise OwnershipDeniedError("One or more sections do not belong to this account")
        return self.list(owner_id)

    def copy_template(
        self,
        owner_id: str,
        template_type: str,
        title: str,
        description: Optional[str] = None,
    ) -> ContentSection:
        """Copy a public template section owned by the template account into a fresh section for ``owner_id``."""
        template_owner_id = self._template_owner_id(owner_id)
        template = self.repository.find_template(template_type, template_owner_id) if template_owner_id else None
        if template is None:
            raise NotFoundError(f"No template available for type '{template_type}'")
        title = (title or "").strip()
        if not title:
            raise InvalidContentError("Title is required")
        content = copy.deepcopy(template.content or {})
        values = {
            "title": title,
            "type": template.type,
            "description": description,
            "is_public": section_content.is_public_of(content),
            "order": self._next_order(owner_id),
            "layout": section_content.layout_of(content),
            "content": content,
        }
        section = self._insert_with_slug(owner_id, values, None, title)
        logger.info(
            "Copied template %s into section %s",
            template_type,
            section.slug,
            extra={"account_id": owner_id, "section_id": section.id},
        )
        return section

    # -------------------------------------- entries --------------------------------------
    def _save_content(self, section_id: str, owner_id: str, content: dict) -> ContentSection:
        updated = self.repository.update_owned_section(section_id, owner_id, {"content": content})
        if updated is None:
            raise OwnershipDeniedError(NOT_OWNED)
        return updated

    def add_entry(self, section_id: str, owner_id: str, entry: dict) -> ContentSection:
        section = self._owned(section_id, owner_id)
        model = section_content.parse_content(section.type, section.content)
        missing = section_content.missing_required_fields(model, entry or {})
        if missing:
            raise InvalidContentError(f"Missing required field(s): {', '.join(missing)}")
        if model.max_entries is not None and len(model.entries) >= model.max_entries:
            raise InvalidContentError(f"This section accepts at most {model.max_entries} entries")
        return self._save_content(section_id, owner_id, section_content.add_entry(section.content, entry or {}))

    def update_entry(self, section_id: str, owner_id: str, entry_id: str, patch: dict) -> ContentSection:
        section = self._owned(section_id, owner_id)
        content = section_content.update_entry(section.content, entry_id, patch or {})
        return self._save_content(section_id, owner_id, content)

    def remove_entry(self, section_id: str, owner_id: str, entry_id: str) -> ContentSection:
        section = self._owned(section_id, owner_id)
        content = section_content.remove_entry(section.content, entry_id)
        return self._save_content(section_id, owner_id, content)
