"""SQLAlchemy models for accounts, credentials, configuration and content."""
from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    JSON,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .session import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Account(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    username = Column(String(64), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    first_name = Column(String(255), nullable=False, default="")
    last_name = Column(String(255), nullable=False, default="")
    bio = Column(Text, nullable=True)
    phone = Column(String(64), nullable=True)
    location = Column(String(255), nullable=True)
    linkedin_url = Column(Text, nullable=True)
    github_url = Column(Text, nullable=True)
    website_url = Column(Text, nullable=True)
    avatar_url = Column(Text, nullable=True)
    portfolio_slug = Column(String(64), unique=True, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    credentials = relationship("Credential", back_populates="account", cascade="all,delete-orphan")
    config = relationship("PortfolioConfig", uselist=False, back_populates="account", cascade="all,delete-orphan")


class Credential(Base):
    """A linked login method: local password or external provider subject."""

    __tablename__ = "accounts"
    __table_args__ = (UniqueConstraint("provider", "provider_subject_id", name="accounts_provider_subject_key"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(32), nullable=False)
    provider = Column(String(64), nullable=False)
    provider_subject_id = Column(String(255), nullable=False)
    password_hash = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    account = relationship("Account", back_populates="credentials")


class PortfolioConfig(Base):
    __tablename__ = "portfolio_configs"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    section_order = Column(JSON, nullable=False, default=list)
    layout_type = Column(String(64), nullable=False, default="default")
    theme = Column(String(64), nullable=False, default="light")
    primary_color = Column(String(32), nullable=False, default="#3b82f6")
    font_family = Column(String(128), nullable=False, default="Inter")
    spacing = Column(String(64), nullable=False, default="comfortable")
    show_profile_image = Column(Boolean, nullable=False, default=True)
    show_social_links = Column(Boolean, nullable=False, default=True)
    show_contact_info = Column(Boolean, nullable=False, default=True)
    custom_css = Column(Text, nullable=True)
    animations_enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    account = relationship("Account", back_populates="config")


class ContentSection(Base):
    __tablename__ = "custom_sections"
    __table_args__ = (UniqueConstraint("user_id", "slug", name="custom_sections_user_slug_key"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(128), nullable=False)
    type = Column(String(64), nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=True)
    order = Column(Integer, nullable=False)
    layout = Column(String(64), nullable=False, default="default")
    content = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class Experience(Base):
    __tablename__ = "experiences"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    company_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)
    is_current = Column(Boolean, nullable=False, default=False)
    location = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class Skill(Base):
    __tablename__ = "skills"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(128), nullable=True)
    proficiency = Column(Integer, nullable=True, default=1)
    years_of_experience = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class UserSession(Base):
    __tablename__ = "sessions"

    token = Column(String(128), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
