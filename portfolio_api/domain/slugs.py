"""Domain helpers for slug normalisation and validation."""
from __future__ import annotations

import re

FALLBACK_SLUG = "untitled"
SLUG_PATTERN = re.compile(r"[a-z0-9-]{3,30}")
_NON_SLUG_RUN = re.compile(r"[^a-z0-9]+")
RESERVED_SLUGS = {
    "admin",
    "api",
    "auth",
    "account",
    "dashboard",
    "login",
    "logout",
    "portfolios",
    "static",
    "health",
}


def slugify(value: str | None) -> str:
    """Lowercase, collapse non [a-z0-9] runs into one hyphen, trim hyphens.

    Returns FALLBACK_SLUG when nothing usable is left.
    """
    candidate = _NON_SLUG_RUN.sub("-", (value or "").lower()).strip("-")
    return candidate or FALLBACK_SLUG


def with_suffix(base: str, attempt: int) -> str:
    if attempt <= 0:
        return base
    return f"{base}-{attempt}"


def email_local_part(email: str | None) -> str:
    return (email or "").strip().split("@", 1)[0]


def is_valid_slug(value: str | None) -> bool:
    """Return True when a public portfolio slug matches the allowed pattern and is not reserved."""
    if not value:
        return False
    return bool(SLUG_PATTERN.fullmatch(value)) and value not in RESERVED_SLUGS
