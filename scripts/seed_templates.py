#!/usr/bin/env python3
"""
Seed the built-in section templates under the system account.

Usage:
  python scripts/seed_templates.py [--database-url sqlite:///portfolio.db] [--email templates@system.local]
"""
from __future__ import annotations

import argparse
import copy
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio_api.core.config import get_settings
from portfolio_api.db.session import Database
from portfolio_api.domain.section_content import BUILTIN_TEMPLATES, layout_of
from portfolio_api.domain.slugs import email_local_part, slugify
from portfolio_api.repositories.sql_repository import SQLRepository
from portfolio_api.services.allocator import IdentifierAllocator

SYSTEM_PROVIDER = "system"


def ensure_system_account(repo: SQLRepository, allocator: IdentifierAllocator, email: str):
    account = repo.get_account_by_email(email)
    if account:
        return account

    def insert(username: str):
        return repo.create_account(
            username=username,
            email=email,
            first_name="Templates",
            last_name="",
            provider=SYSTEM_PROVIDER,
            provider_subject_id=email,
            credential_type=SYSTEM_PROVIDER,
        )

    return allocator.allocate_and_insert(email_local_part(email), repo.handle_taken, insert)


def seed(repo: SQLRepository, allocator: IdentifierAllocator, email: str) -> list[str]:
    """Create each missing built-in template; returns the types that were added."""
    account = ensure_system_account(repo, allocator, email)
    present = {section.type for section in repo.list_sections(account.id)}
    added = []
    for order, (template_type, template) in enumerate(BUILTIN_TEMPLATES.items(), start=1):
        if template_type in present:
            continue
        content = copy.deepcopy(template["content"])
        repo.create_section(
            account.id,
            {
                "title": template["title"],
                "slug": slugify(template_type),
                "type": template_type,
                "description": template["description"],
                "is_public": True,
                "order": order,
                "layout": layout_of(content),
                "content": content,
            },
        )
        added.append(template_type)
    return added


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Seed built-in section templates")
    ap.add_argument("--database-url", default=settings.database_url, help="SQLAlchemy URL (default: DATABASE_URL)")
    ap.add_argument("--email", default=settings.system_account_email, help="Email of the account owning templates")
    ap.add_argument("--create-tables", action="store_true", help="Create missing tables first")
    args = ap.parse_args()

    database = Database(args.database_url).init()
    try:
        if args.create_tables:
            database.create_all()
        repo = SQLRepository(database)
        allocator = IdentifierAllocator(settings.allocation_max_attempts)
        added = seed(repo, allocator, (args.email or "").strip().lower())
    finally:
        database.shutdown()

    if added:
        print("OK: templates seeded")
        for template_type in added:
            print(f"  {template_type}")
    else:
        print("OK: all templates already present")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
