from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Import result and run phase models.

ImportResult is constructed once at the end of an import run and never
mutated; the next run replaces it.
"""

__all__ = [
    "ImportPhase",
    "ImportResult",
    "SubmitOutcome",
]


class ImportPhase(Enum):
    """Phase of an import run.

    State transitions: idle -> parsing -> validating -> submitting -> done,
    with early exits parsing -> done and validating -> done.
    """
    IDLE = "idle"
    PARSING = "parsing"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    DONE = "done"


@dataclass(frozen=True)
class SubmitOutcome:
    """Echo of the bulk endpoint (or of a failed transport call)."""
    success: int
    errors: tuple[str, ...] = ()
    transport_failed: bool = False  # no usable answer from the backend


@dataclass(frozen=True)
class ImportResult:
    """Final report of one import run.

    Attributes:
        success_count: Rows accepted by the backend
        errors: Client-side errors first, then server-reported errors
    """
    success_count: int
    errors: tuple[str, ...] = field(default_factory=tuple)

    @staticmethod
    def failed(message: str) -> ImportResult:
        """Result for a terminal file-level or transport failure."""
        return ImportResult(success_count=0, errors=(message,))

    @property
    def ok(self) -> bool:
        return self.success_count > 0 and not self.errors
