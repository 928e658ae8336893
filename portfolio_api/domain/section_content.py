"""Typed content payloads for content sections.

The ``content`` column is stored as JSON. At the service boundary it is
validated into one model per known section ``type``; any other type is
validated as a generic ``custom`` document. Keys are camelCase on the wire
and in storage.
"""
from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from portfolio_api.domain.errors import InvalidContentError, NotFoundError

DEFAULT_LAYOUT = "default"


class FieldSpec(BaseModel):
    model_config = ConfigDict(extra="allow")

    label: str
    required: bool = False
    type: str = "text"
    placeholder: Optional[str] = None


class SectionContent(BaseModel):
    model_config = ConfigDict(extra="allow", alias_generator=to_camel, populate_by_name=True)

    type: str
    layout: str = DEFAULT_LAYOUT
    is_public: bool = True
    order: int = 0
    allow_images: bool = False
    allow_code: bool = False
    max_entries: Optional[int] = None
    fields: list[str] = Field(default_factory=list)
    template: dict[str, FieldSpec] = Field(default_factory=dict)
    entries: list[dict[str, Any]] = Field(default_factory=list)

    def dump(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class StarMemoContent(SectionContent):
    type: Literal["star-memo"] = "star-memo"
    layout: str = "timeline"


class ProjectShowcaseContent(SectionContent):
    type: Literal["project-showcase"] = "project-showcase"
    layout: str = "grid"
    max_projects: Optional[int] = None


class CommunityEngagementContent(SectionContent):
    type: Literal["community-engagement"] = "community-engagement"
    layout: str = "list"


class SpeakingEngagementsContent(SectionContent):
    type: Literal["speaking-engagements"] = "speaking-engagements"
    layout: str = "timeline"


class CertificationsContent(SectionContent):
    type: Literal["certifications"] = "certifications"
    layout: str = "cards"


class CustomContent(SectionContent):
    """User-defined section: any type tag, free field template."""

    type: str = "custom"


CONTENT_MODELS: dict[str, type[SectionContent]] = {
    "star-memo": StarMemoContent,
    "project-showcase": ProjectShowcaseContent,
    "community-engagement": CommunityEngagementContent,
    "speaking-engagements": SpeakingEngagementsContent,
    "certifications": CertificationsContent,
}


def content_model_for(section_type: str) -> type[SectionContent]:
    return CONTENT_MODELS.get(section_type, CustomContent)


def parse_content(section_type: str, payload: Any) -> SectionContent:
    """Validate a raw payload for ``section_type``; raises InvalidContentError."""
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidContentError("Content must be an object")
    data = dict(payload)
    declared = data.get("type")
    if declared and declared != section_type:
        raise InvalidContentError(f"Content type '{declared}' does not match section type '{section_type}'")
    data["type"] = section_type
    try:
        return content_model_for(section_type).model_validate(data)
    except ValidationError as exc:
        raise InvalidContentError(f"Invalid content for '{section_type}': {exc.error_count()} error(s)") from exc


def layout_of(content: Any) -> str:
    if isinstance(content, dict):
        layout = content.get("layout")
        if isinstance(layout, str) and layout:
            return layout
    return DEFAULT_LAYOUT


def is_public_of(content: Any) -> bool:
    if isinstance(content, dict) and isinstance(content.get("isPublic"), bool):
        return content["isPublic"]
    return True


def missing_required_fields(content: SectionContent, entry: dict) -> list[str]:
    return [name for name, spec in content.template.items() if spec.required and not entry.get(name)]


# -------------------------------------- entries --------------------------------------
def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_entry_id() -> str:
    return f"entry_{uuid.uuid4()}"


def add_entry(content: dict, entry: dict) -> dict:
    """Return a copy of ``content`` with ``entry`` appended (id and timestamps stamped)."""
    updated = copy.deepcopy(content or {})
    entries = list(updated.get("entries") or [])
    now = _now_iso()
    stamped = {**entry}
    stamped["id"] = stamped.get("id") or new_entry_id()
    stamped["createdAt"] = stamped.get("createdAt") or now
    stamped["updatedAt"] = now
    entries.append(stamped)
    updated["entries"] = entries
    return updated


def update_entry(content: dict, entry_id: str, patch: dict) -> dict:
    updated = copy.deepcopy(content or {})
    entries = list(updated.get("entries") or [])
    for index, entry in enumerate(entries):
        if entry.get("id") == entry_id:
            merged = {**entry, **patch, "id": entry_id, "updatedAt": _now_iso()}
            entries[index] = merged
            updated["entries"] = entries
            return updated
    raise NotFoundError(f"Entry {entry_id} not found")


def remove_entry(content: dict, entry_id: str) -> dict:
    updated = copy.deepcopy(content or {})
    entries = [entry for entry in (updated.get("entries") or []) if entry.get("id") != entry_id]
    if len(entries) == len(updated.get("entries") or []):
        raise NotFoundError(f"Entry {entry_id} not found")
    updated["entries"] = entries
    return updated


# -------------------------------------- built-in templates --------------------------------------
def _field(label: str, type_: str, required: bool = True) -> dict:
    return {"label": label, "required": required, "type": type_}


BUILTIN_TEMPLATES: dict[str, dict] = {
    "star-memo": {
        "title": "STAR Memos",
        "description": "Professional achievements using the STAR method (Situation, Task, Action, Result)",
        "content": {
            "type": "star-memo",
            "layout": "timeline",
            "isPublic": True,
            "order": 1,
            "allowImages": True,
            "allowCode": False,
            "maxEntries": 10,
            "fields": ["title", "situation", "task", "action", "result"],
            "entries": [],
            "template": {
                "title": _field("Title", "text"),
                "situation": _field("Situation", "textarea"),
                "task": _field("Task", "textarea"),
                "action": _field("Action", "textarea"),
                "result": _field("Result", "textarea"),
            },
        },
    },
    "project-showcase": {
        "title": "Project Showcase",
        "description": "Showcase your technical projects with descriptions, technologies, and outcomes",
        "content": {
            "type": "project-showcase",
            "layout": "grid",
            "isPublic": True,
            "order": 2,
            "allowImages": True,
            "allowCode": True,
            "maxProjects": 6,
            "fields": ["title", "description", "technologies", "outcome", "images"],
            "entries": [],
            "template": {
                "title": _field("Project Title", "text"),
                "description": _field("Description", "textarea"),
                "technologies": _field("Technologies Used", "tags", required=False),
                "outcome": _field("Outcome/Results", "textarea"),
                "images": _field("Project Images", "image-gallery", required=False),
            },
        },
    },
    "community-engagement": {
        "title": "Community Engagement",
        "description": "Highlight your involvement in professional communities and events",
        "content": {
            "type": "community-engagement",
            "layout": "list",
            "isPublic": True,
            "order": 3,
            "allowImages": True,
            "allowCode": False,
            "fields": ["event", "role", "date", "description", "impact"],
            "entries": [],
            "template": {
                "event": _field("Event/Organization", "text"),
                "role": _field("Your Role", "text"),
                "date": _field("Date", "date"),
                "description": _field("Description", "textarea"),
                "impact": _field("Impact/Outcome", "textarea", required=False),
            },
        },
    },
    "speaking-engagements": {
        "title": "Speaking Engagements",
        "description": "Talks, panels and presentations you have given",
        "content": {
            "type": "speaking-engagements",
            "layout": "timeline",
            "isPublic": True,
            "order": 4,
            "allowImages": True,
            "allowCode": False,
            "fields": ["event", "title", "date", "audience", "description", "slides"],
            "entries": [],
            "template": {
                "event": _field("Event/Conference", "text"),
                "title": _field("Presentation Title", "text"),
                "date": _field("Date", "date"),
                "audience": _field("Audience Size", "text", required=False),
                "description": _field("Description", "textarea"),
                "slides": _field("Slides/Recording URL", "url", required=False),
            },
        },
    },
    "certifications": {
        "title": "Certifications",
        "description": "Professional certifications and credentials",
        "content": {
            "type": "certifications",
            "layout": "cards",
            "isPublic": True,
            "order": 5,
            "allowImages": True,
            "allowCode": False,
            "fields": ["name", "issuer", "date", "expiry", "credentialId", "description"],
            "entries": [],
            "template": {
                "name": _field("Certification Name", "text"),
                "issuer": _field("Issuing Organization", "text"),
                "date": _field("Date Earned", "date"),
                "expiry": _field("Expiry Date", "date", required=False),
                "credentialId": _field("Credential ID", "text", required=False),
                "description": _field("Description", "textarea", required=False),
            },
        },
    },
}
