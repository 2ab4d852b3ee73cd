from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Union

"""Tagged result of a user lookup by email.

`Found(user_id)` or the `NOT_FOUND` marker. Unknown users are an expected
outcome and never raised as exceptions.
"""

__all__ = [
    "Found",
    "LookupResult",
    "NOT_FOUND",
    "NotFound",
]


@dataclass(frozen=True)
class Found:
    user_id: str


class NotFound:
    """Singleton marker for an email with no matching user."""
    _instance: NotFound | None = None

    def __new__(cls) -> NotFound:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND: Final = NotFound()

LookupResult = Union[Found, NotFound]
