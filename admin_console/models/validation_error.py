from __future__ import annotations

from dataclasses import dataclass

"""ValidationError model for row-level import failures.

Row numbers are 1-based and include the header offset, so the first data row
of an upload is row 2 (the number a user sees in a spreadsheet).
"""

__all__ = [
    "HEADER_OFFSET",
    "ValidationError",
    "human_row_number",
]

# data index 0 -> spreadsheet row 2 (row 1 is the header)
HEADER_OFFSET = 2


def human_row_number(index: int) -> int:
    """Convert a 0-based data row index to the row number a user sees."""
    return index + HEADER_OFFSET


@dataclass(frozen=True)
class ValidationError:
    """Row-level error (immutable).

    Attributes:
        row_number: 1-based row number including the header row
        message: Human readable reason without the row prefix
    """
    row_number: int
    message: str

    def __str__(self) -> str:
        return f"Row {self.row_number}: {self.message}"
