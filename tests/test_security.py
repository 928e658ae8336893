from __future__ import annotations

from argon2 import PasswordHasher

from portfolio_api.core import security


def test_fresh_hash_verifies_and_needs_no_rehash():
    stored = security.hash_password("correct horse")

    assert stored.startswith("argon2$")
    assert security.verify_password("correct horse", stored)
    assert not security.verify_password("wrong", stored)
    assert security.needs_rehash(stored) is False


def test_weaker_parameters_need_rehash():
    weak = "argon2$" + PasswordHasher(time_cost=1, memory_cost=8192, parallelism=1).hash("correct horse")

    assert security.verify_password("correct horse", weak)
    assert security.needs_rehash(weak) is True


def test_missing_or_unprefixed_hash_never_verifies():
    raw = PasswordHasher().hash("correct horse")

    assert security.verify_password("correct horse", None) is False
    assert security.verify_password("correct horse", raw) is False
