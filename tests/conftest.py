"""
Shared fixtures: a temporary SQLite database and the services built over it.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the portfolio_api package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio_api.app_factory import build_services
from portfolio_api.core.config import Settings
from portfolio_api.db.session import Database


def make_settings(database_url: str, **overrides) -> Settings:
    values = dict(
        app_env="test",
        database_url=database_url,
        public_base_url="http://testserver",
        session_ttl_seconds=3600,
        allocation_max_attempts=5,
        log_level="INFO",
        log_format="text",
        system_account_email="templates@system.local",
    )
    values.update(overrides)
    return Settings(**values)


def sqlite_database(db_file: Path) -> Database:
    # Threads share the file; writers wait on the lock instead of failing fast.
    return Database(f"sqlite:///{db_file}", connect_args={"check_same_thread": False, "timeout": 30})


@pytest.fixture()
def database(tmp_path):
    """A fresh SQLite file per test, fully torn down so nothing stays locked."""
    db = sqlite_database(tmp_path / "test.db").init()
    db.drop_all()
    db.create_all()

    yield db

    db.drop_all()
    db.shutdown()


@pytest.fixture()
def settings(database):
    return make_settings(database.url)


@pytest.fixture()
def services(database, settings):
    return build_services(database, settings)


@pytest.fixture()
def repo(services):
    return services.repository


@pytest.fixture()
def make_account(repo):
    """Create an account with an external credential, bypassing the resolver."""

    def _make(username: str, email: str | None = None):
        return repo.create_account(
            username=username,
            email=email or f"{username}@example.com",
            first_name=username.title(),
            last_name="Tester",
            provider="github",
            provider_subject_id=f"gh-{username}",
            credential_type="oauth",
        )

    return _make
