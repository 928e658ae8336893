from __future__ import annotations

from datetime import datetime, timezone

import pytest

from portfolio_api.domain.errors import InvalidContentError, OwnershipDeniedError


def _experience(**overrides):
    data = {
        "title": "Engineer",
        "company_name": "Acme",
        "description": "Built things",
        "start_date": datetime(2020, 1, 1, tzinfo=timezone.utc),
        "end_date": datetime(2021, 1, 1, tzinfo=timezone.utc),
        "is_current": False,
    }
    data.update(overrides)
    return data


def test_experience_lifecycle(services, make_account):
    owner = make_account("jane")
    created = services.records.create_experience(owner.id, _experience())
    assert created.company_name == "Acme"

    updated = services.records.update_experience(created.id, owner.id, {"is_current": True, "title": "Lead"})
    assert updated.title == "Lead"
    assert updated.is_current is True
    assert updated.end_date is None

    services.records.delete_experience(created.id, owner.id)
    assert services.records.list_experiences(owner.id) == []


def test_experience_requires_core_fields(services, make_account):
    owner = make_account("jane")
    with pytest.raises(InvalidContentError):
        services.records.create_experience(owner.id, _experience(company_name=""))


def test_experiences_are_owner_scoped(services, make_account):
    owner = make_account("jane")
    intruder = make_account("mallory")
    created = services.records.create_experience(owner.id, _experience())

    with pytest.raises(OwnershipDeniedError):
        services.records.update_experience(created.id, intruder.id, {"title": "x"})
    with pytest.raises(OwnershipDeniedError):
        services.records.delete_experience(created.id, intruder.id)
    with pytest.raises(OwnershipDeniedError):
        services.records.delete_experience("missing", owner.id)
    assert services.records.list_experiences(intruder.id) == []
    assert len(services.records.list_experiences(owner.id)) == 1


def test_skill_lifecycle_and_ownership(services, make_account):
    owner = make_account("jane")
    intruder = make_account("mallory")
    python = services.records.create_skill(owner.id, {"name": "Python", "category": "Languages", "proficiency": 5})
    services.records.create_skill(owner.id, {"name": "Docker", "category": "Tooling"})

    assert [skill.name for skill in services.records.list_skills(owner.id)] == ["Python", "Docker"]

    updated = services.records.update_skill(python.id, owner.id, {"years_of_experience": 7})
    assert updated.years_of_experience == 7
    assert updated.proficiency == 5

    with pytest.raises(OwnershipDeniedError):
        services.records.update_skill(python.id, intruder.id, {"name": "Hijacked"})
    with pytest.raises(InvalidContentError):
        services.records.create_skill(owner.id, {"name": "  "})

    services.records.delete_skill(python.id, owner.id)
    assert [skill.name for skill in services.records.list_skills(owner.id)] == ["Docker"]
