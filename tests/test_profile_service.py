from __future__ import annotations

import pytest

from portfolio_api.domain.errors import InvalidSlugError, NotFoundError, SlugUnavailableError


def test_update_profile_ignores_unknown_and_required_nulls(services, make_account):
    account = make_account("jane")
    updated = services.profiles.update_profile(
        account.id,
        {"bio": "Hello", "first_name": None, "email": "evil@example.com"},
    )
    assert updated.bio == "Hello"
    assert updated.first_name == "Jane"
    assert updated.email == "jane@example.com"


def test_change_portfolio_slug(services, make_account):
    jane = make_account("jane")
    make_account("bob")

    assert services.profiles.change_portfolio_slug(jane.id, "Jane-Doe").portfolio_slug == "jane-doe"
    with pytest.raises(SlugUnavailableError):
        services.profiles.change_portfolio_slug(jane.id, "bob")
    with pytest.raises(InvalidSlugError):
        services.profiles.change_portfolio_slug(jane.id, "admin")
    with pytest.raises(InvalidSlugError):
        services.profiles.change_portfolio_slug(jane.id, "x")


def test_public_portfolio_hides_private_accounts_and_sections(services, make_account):
    jane = make_account("jane")
    services.sections.create(jane.id, {"title": "Visible"})
    services.sections.create(jane.id, {"title": "Hidden", "is_public": False})
    services.records.create_skill(jane.id, {"name": "Python"})

    with pytest.raises(NotFoundError):
        services.profiles.get_public_portfolio("jane")

    services.profiles.set_visibility(jane.id, True)
    portfolio = services.profiles.get_public_portfolio("jane")

    assert portfolio.account.id == jane.id
    assert [section.title for section in portfolio.sections] == ["Visible"]
    assert [skill.name for skill in portfolio.skills] == ["Python"]
    with pytest.raises(NotFoundError):
        services.profiles.get_public_portfolio("nobody")
