from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Session gate domain models."""

__all__ = [
    "AuthDecision",
    "CurrentUser",
    "SessionEntry",
]


class AuthDecision(Enum):
    GRANTED = "granted"
    DENIED = "denied"
    PENDING = "pending"


@dataclass(frozen=True)
class CurrentUser:
    """Identity exposed by the authentication provider."""
    uid: str
    email: str | None = None


@dataclass(frozen=True)
class SessionEntry:
    """Cached authorization result. Replaced whole, never mutated."""
    verified: bool
    timestamp: float  # clock reading at verification time
