"""Pydantic models for request bodies and inbound credentials."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from portfolio_api.domain.errors import MalformedCredentialError

LOCAL_PROVIDER = "credentials"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_email(value: str) -> str:
    value = (value or "").strip().lower()
    local, sep, domain = value.partition("@")
    if not (local and sep and domain) or " " in value:
        raise ValueError("invalid email address")
    return value


Email = Annotated[str, AfterValidator(_check_email)]


# -------------------------------------- credentials --------------------------------------
class PasswordCredential(CamelModel):
    provider: Literal["credentials"] = LOCAL_PROVIDER
    email: Email
    password: str = Field(min_length=1)


class ProviderAssertion(CamelModel):
    provider: str = Field(min_length=1, max_length=64)
    provider_subject_id: str = Field(min_length=1, max_length=255)
    email: Email
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @field_validator("provider")
    @classmethod
    def _not_local(cls, value: str) -> str:
        value = value.strip().lower()
        if value == LOCAL_PROVIDER:
            raise ValueError("the local provider requires a password")
        return value


def parse_credential(payload: Any) -> PasswordCredential | ProviderAssertion:
    """Validate an inbound login payload; raises MalformedCredentialError."""
    if isinstance(payload, (PasswordCredential, ProviderAssertion)):
        return payload
    if not isinstance(payload, dict):
        raise MalformedCredentialError("Credential payload must be an object")
    provider = str(payload.get("provider") or "").strip().lower()
    model = PasswordCredential if provider == LOCAL_PROVIDER else ProviderAssertion
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise MalformedCredentialError(f"Malformed credential: {exc.error_count()} error(s)") from exc


# -------------------------------------- auth --------------------------------------
class RegisterRequest(CamelModel):
    email: Email
    password: str
    first_name: str = ""
    last_name: str = ""
    username: Optional[str] = None


class LoginRequest(CamelModel):
    email: str
    password: str


# -------------------------------------- sections --------------------------------------
class SectionCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    type: str = "custom"
    slug: Optional[str] = None
    description: Optional[str] = None
    is_public: bool = True
    order: Optional[int] = None
    layout: Optional[str] = None
    content: Optional[dict[str, Any]] = None


class SectionPatch(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None
    order: Optional[int] = None
    layout: Optional[str] = None
    content: Optional[dict[str, Any]] = None


class ReorderItem(CamelModel):
    id: str
    order: int


class ReorderRequest(CamelModel):
    items: list[ReorderItem]


class CopyTemplateRequest(CamelModel):
    template_type: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None


# -------------------------------------- configuration --------------------------------------
class SectionDescriptor(CamelModel):
    id: str
    type: Literal["profile", "experiences", "skills", "custom"]
    order: int
    is_visible: bool = True
    layout: str = "default"
    section_id: Optional[str] = None


class ConfigPatch(CamelModel):
    section_order: Optional[list[SectionDescriptor]] = None
    layout_type: Optional[str] = None
    theme: Optional[str] = None
    primary_color: Optional[str] = None
    font_family: Optional[str] = None
    spacing: Optional[str] = None
    show_profile_image: Optional[bool] = None
    show_social_links: Optional[bool] = None
    show_contact_info: Optional[bool] = None
    custom_css: Optional[str] = None
    animations_enabled: Optional[bool] = None


# -------------------------------------- profile & records --------------------------------------
class ProfilePatch(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    website_url: Optional[str] = None
    avatar_url: Optional[str] = None


class VisibilityRequest(CamelModel):
    is_public: bool


class SlugRequest(CamelModel):
    slug: str


class ExperienceCreate(CamelModel):
    title: str = Field(min_length=1)
    company_name: str = Field(min_length=1)
    description: str = ""
    start_date: datetime
    end_date: Optional[datetime] = None
    is_current: bool = False
    location: Optional[str] = None


class ExperiencePatch(CamelModel):
    title: Optional[str] = None
    company_name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_current: Optional[bool] = None
    location: Optional[str] = None


class SkillCreate(CamelModel):
    name: str = Field(min_length=1)
    description: str = ""
    category: Optional[str] = None
    proficiency: Optional[int] = Field(default=1, ge=1, le=5)
    years_of_experience: Optional[int] = Field(default=None, ge=0)


class SkillPatch(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    proficiency: Optional[int] = Field(default=None, ge=1, le=5)
    years_of_experience: Optional[int] = Field(default=None, ge=0)
