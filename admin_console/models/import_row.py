from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum

"""ImportRow model for the transaction bulk import.

An ImportRow is the canonical form of one uploaded transaction record after
normalization and validation. It is the shape sent to the bulk endpoint.
"""

__all__ = [
    "EXPECTED_COLUMNS",
    "ImportRow",
    "TransactionStatus",
]

# Column order of the upload template and of the normalized row mapping
EXPECTED_COLUMNS: tuple[str, ...] = ("email", "date", "amount", "type", "status")


class TransactionStatus(Enum):
    """Accepted transaction status values (compared case-insensitively)."""
    PAID = "paid"
    PENDING = "pending"
    FAILED = "failed"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(s.value for s in cls)


@dataclass(frozen=True)
class ImportRow:
    """Validated, canonical transaction row.

    email is lower-cased and trimmed, type trimmed, status lower-cased.
    amount is an int when integral, else the float value.
    """
    email: str
    date: str  # DD/MM/YYYY
    amount: int | float
    type: str
    status: str  # one of TransactionStatus values

    def to_payload(self) -> dict[str, object]:
        """Serialize for the bulk endpoint body."""
        return asdict(self)
