from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from ..models.lookup import NOT_FOUND, Found, LookupResult

"""Identity resolver: email -> user id, memoized per import run.

Each distinct (normalized) email triggers at most one external lookup per
run. Known-missing emails are cached as NOT_FOUND so they are not queried
again. Concurrent resolves for the same email share one in-flight lookup.
"""

__all__ = [
    "IdentityCache",
    "IdentityResolver",
    "UserStore",
    "normalize_email",
]

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    """Query-by-email capability of the external user store."""

    async def find_user_id_by_email(self, email: str) -> str | None: ...


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityCache:
    """Per-run mapping of normalized email to Found(user_id) | NOT_FOUND.

    Created at the start of an import run and discarded when it completes.
    """

    def __init__(self) -> None:
        self._entries: dict[str, LookupResult] = {}

    def get(self, email: str) -> LookupResult | None:
        return self._entries.get(email)

    def put(self, email: str, result: LookupResult) -> None:
        self._entries[email] = result

    def __contains__(self, email: object) -> bool:
        return email in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class IdentityResolver:
    """Resolve emails through a UserStore with per-run memoization."""

    def __init__(self, store: UserStore, cache: IdentityCache | None = None) -> None:
        self._store = store
        self.cache = cache if cache is not None else IdentityCache()
        self._in_flight: dict[str, asyncio.Task[LookupResult]] = {}
        self.lookup_count = 0  # external lookups issued by this resolver

    async def resolve(self, email: str) -> LookupResult:
        """Return Found(user_id) or NOT_FOUND for email.

        Transport / store faults propagate; nothing is cached for them.
        """
        key = normalize_email(email)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is not None:
            return await task

        task = asyncio.ensure_future(self._lookup(key))
        self._in_flight[key] = task
        try:
            return await task
        finally:
            self._in_flight.pop(key, None)

    async def _lookup(self, key: str) -> LookupResult:
        self.lookup_count += 1
        user_id = await self._store.find_user_id_by_email(key)
        result: LookupResult = Found(user_id) if user_id else NOT_FOUND
        self.cache.put(key, result)
        if result is NOT_FOUND:
            logger.debug(f"identity: no user for {key}")
        return result
