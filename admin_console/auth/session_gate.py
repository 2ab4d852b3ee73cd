from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Protocol

from ..models.session import AuthDecision, CurrentUser, SessionEntry

"""Session gate: is the current caller an authorized administrator?

- No user -> DENIED (redirect to login, no lookup).
- Positive cache entry younger than the TTL -> GRANTED without a lookup.
- Otherwise exactly one lookup of the user's admin flag. A positive result is
  cached; a negative result or a failed lookup -> DENIED plus a blocking
  notice. Denials are never retried automatically.

The cache is only ever written from a positive lookup result.
"""

__all__ = [
    "DEFAULT_TTL_SECONDS",
    "DENIED_NOTICE",
    "AuthorizationSource",
    "NotAuthenticatedError",
    "SessionCache",
    "SessionGate",
    "SessionTokenProvider",
    "StaticTokenProvider",
]

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0
DENIED_NOTICE = "Access Denied. You are not an administrator."


class NotAuthenticatedError(Exception):
    """Raised when a token is requested without a signed-in user."""


class AuthorizationSource(Protocol):
    """Capabilities consumed from the authentication provider / user store."""

    async def is_admin(self, user_id: str) -> bool: ...

    async def issue_token(self, user: CurrentUser) -> str: ...


class SessionCache:
    """Process-wide cache of positive authorization results (uid -> SessionEntry).

    Entries are valid while clock() - timestamp < ttl_seconds. Writes replace
    the whole entry.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, SessionEntry] = {}

    def get_valid(self, uid: str) -> SessionEntry | None:
        entry = self._entries.get(uid)
        if entry is None or not entry.verified:
            return None
        if self._clock() - entry.timestamp >= self.ttl_seconds:
            return None
        return entry

    def is_verified(self, uid: str | None) -> bool:
        return uid is not None and self.get_valid(uid) is not None

    def record_verified(self, uid: str) -> SessionEntry:
        entry = SessionEntry(verified=True, timestamp=self._clock())
        self._entries[uid] = entry
        return entry

    def invalidate(self, uid: str) -> None:
        self._entries.pop(uid, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class SessionGate:
    """Authorization gate for one mounted protected screen.

    `state` is PENDING until a decision is reached. Concurrent authorize()
    calls for the same user on one gate share a single lookup.
    """

    def __init__(
        self,
        source: AuthorizationSource,
        cache: SessionCache,
        *,
        notify: Callable[[str], None] | None = None,
    ) -> None:
        self._source = source
        self._cache = cache
        self._notify = notify if notify is not None else logger.warning
        self.state = AuthDecision.PENDING
        self._uid: str | None = None
        self._verified = False
        self._in_flight: asyncio.Task[AuthDecision] | None = None
        self.lookup_count = 0

    async def authorize(self, user: CurrentUser | None) -> AuthDecision:
        if user is None:
            self._reset(None)
            self.state = AuthDecision.DENIED
            return self.state

        if user.uid != self._uid:
            self._reset(user.uid)

        if self._cache.is_verified(user.uid):
            self._verified = True
            self.state = AuthDecision.GRANTED
            return self.state

        # 同一マウント内で検証済みなら再確認しない
        if self._verified:
            self.state = AuthDecision.GRANTED
            return self.state

        if self._in_flight is None:
            self._in_flight = asyncio.ensure_future(self._verify(user.uid))
        return await self._in_flight

    async def _verify(self, uid: str) -> AuthDecision:
        self.lookup_count += 1
        try:
            is_admin = await self._source.is_admin(uid)
        except Exception as e:
            logger.error(f"auth: admin flag lookup failed uid={uid}: {e}")
            is_admin = False

        if uid != self._uid:
            # identity changed while the lookup was outstanding
            return AuthDecision.PENDING

        if is_admin is True:
            self._cache.record_verified(uid)
            self._verified = True
            self.state = AuthDecision.GRANTED
        else:
            self.state = AuthDecision.DENIED
            self._notify(DENIED_NOTICE)
        return self.state

    def _reset(self, uid: str | None) -> None:
        self._uid = uid
        self._verified = False
        self._in_flight = None
        self.state = AuthDecision.PENDING

    async def request_token(self, user: CurrentUser | None) -> str:
        if user is None:
            raise NotAuthenticatedError("User not authenticated. Cannot make admin request.")
        return await self._source.issue_token(user)

    def logout(self) -> None:
        self._cache.clear()
        self._reset(None)


class SessionTokenProvider:
    """TokenProvider bound to the signed-in user."""

    def __init__(self, gate: SessionGate, user: CurrentUser | None) -> None:
        self._gate = gate
        self._user = user

    async def get_token(self) -> str:
        return await self._gate.request_token(self._user)


class StaticTokenProvider:
    """TokenProvider with a pre-issued token (ADMIN_API_TOKEN for the CLI)."""

    def __init__(self, token: str | None) -> None:
        self._token = token

    async def get_token(self) -> str:
        if not self._token:
            raise NotAuthenticatedError("User not authenticated. Cannot make admin request.")
        return self._token
