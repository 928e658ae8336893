from __future__ import annotations

import pytest

from portfolio_api.domain.errors import InvalidContentError
from portfolio_api.services.config_service import DEFAULT_SECTION_ORDER, default_config_values


def test_ensure_is_idempotent(services, repo, make_account):
    account = make_account("jane")

    first = services.configs.ensure(account.id)
    second = services.configs.ensure(account.id)

    assert first.id == second.id
    assert repo.count_configs(account.id) == 1
    assert first.section_order == DEFAULT_SECTION_ORDER
    assert [item["type"] for item in first.section_order] == ["profile", "experiences", "skills"]
    assert first.theme == "light"


def test_ensure_rereads_when_a_concurrent_create_wins(services, repo, make_account, monkeypatch):
    account = make_account("jane")
    winner = repo.create_config(account.id, default_config_values())

    real_get = repo.get_config
    calls = {"n": 0}

    def stale_then_real(user_id):
        calls["n"] += 1
        # The first read happens before the other writer committed.
        return None if calls["n"] == 1 else real_get(user_id)

    monkeypatch.setattr(repo, "get_config", stale_then_real)
    result = services.configs.ensure(account.id)

    assert result.id == winner.id
    assert repo.count_configs(account.id) == 1


def test_default_values_are_independent_copies():
    values = default_config_values()
    values["section_order"][0]["isVisible"] = False
    assert DEFAULT_SECTION_ORDER[0]["isVisible"] is True


def test_update_applies_only_present_fields(services, make_account):
    account = make_account("jane")
    updated = services.configs.update(account.id, {"theme": "dark", "primary_color": None, "unknown": 1})

    assert updated.theme == "dark"
    assert updated.primary_color == "#3b82f6"

    cleared = services.configs.update(account.id, {"custom_css": "body{}"})
    assert cleared.custom_css == "body{}"
    assert services.configs.update(account.id, {"custom_css": None}).custom_css is None


def test_update_sorts_and_validates_section_order(services, make_account):
    account = make_account("jane")
    order = [
        {"id": "skills", "type": "skills", "order": 2, "isVisible": True, "layout": "default"},
        {"id": "profile", "type": "profile", "order": 1, "isVisible": False, "layout": "default"},
    ]
    updated = services.configs.update(account.id, {"section_order": order})
    assert [item["id"] for item in updated.section_order] == ["profile", "skills"]

    with pytest.raises(InvalidContentError):
        services.configs.update(account.id, {"section_order": [{"id": "x", "type": "bogus", "order": 1}]})


def test_get_returns_none_before_provisioning(services, make_account):
    account = make_account("jane")
    assert services.configs.get(account.id) is None
