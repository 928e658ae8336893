"""Security helpers (hashing and verification)."""

from __future__ import annotations

import secrets
from functools import lru_cache

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_PREFIX = "argon2$"


def hash_password(password: str) -> str:
    """Create a modern Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


@lru_cache
def _dummy_hash() -> str:
    # Used when there is no stored hash so a miss costs the same as a mismatch.
    return _ph.hash(secrets.token_urlsafe(16))


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = (stored_hash or "").strip()
    if not stored.startswith(_PREFIX):
        try:
            _ph.verify(_dummy_hash(), password or "")
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            pass
        return False
    hashed = stored[len(_PREFIX) :]
    try:
        return _ph.verify(hashed, password or "")
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False


def needs_rehash(stored_hash: str) -> bool:
    """True when the argon2 parameters of a verified hash are outdated."""
    try:
        return _ph.check_needs_rehash(stored_hash[len(_PREFIX) :])
    except argon_exc.InvalidHashError:
        return True


def new_token(nbytes: int = 32) -> str:
    return secrets.token_urlsafe(nbytes)
