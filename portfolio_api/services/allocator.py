"""Collision-safe allocation of human-readable identifiers.

The same allocator serves global scopes (usernames) and per-owner scopes
(section slugs): the caller passes the existence predicate bound to the
uniqueness domain it cares about.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError

from portfolio_api.domain.errors import AllocationExhaustedError
from portfolio_api.domain.slugs import slugify, with_suffix

logger = logging.getLogger(__name__)

T = TypeVar("T")
ExistsCheck = Callable[[str], bool]


class IdentifierAllocator:
    def __init__(self, max_attempts: int = 5):
        self.max_attempts = max(1, int(max_attempts))

    def allocate(self, seed: str | None, exists: ExistsCheck) -> str:
        """Return the first of ``base``, ``base-1``, ``base-2``... absent from the scope.

        No bound on the number of probes: ``exists`` must eventually return
        False.
        """
        base = slugify(seed)
        attempt = 0
        candidate = base
        while exists(candidate):
            attempt += 1
            candidate = with_suffix(base, attempt)
        return candidate

    def allocate_and_insert(self, seed: str | None, exists: ExistsCheck, insert: Callable[[str], T]) -> T:
        """Allocate a candidate and insert it, re-allocating when a concurrent insert won the race.

        ``insert`` must rely on a storage-level unique constraint. An
        IntegrityError is only retried when the scope now reports the
        candidate as taken; a conflict on any other key is re-raised.
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.allocate(seed, exists)
            try:
                return insert(candidate)
            except IntegrityError:
                if not exists(candidate):
                    raise
                logger.info(
                    "Identifier %s taken concurrently, retrying",
                    candidate,
                    extra={"attempt": attempt},
                )
        raise AllocationExhaustedError(
            f"Could not allocate a unique identifier for '{slugify(seed)}' after {self.max_attempts} attempts"
        )
