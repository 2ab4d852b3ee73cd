from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date
from typing import Any

from ..models.import_row import ImportRow, TransactionStatus
from ..models.validation_error import ValidationError
from ..tabular.reader import is_numeric_text

"""Row validator for transaction uploads.

Rules are applied in a fixed order and the first failing rule wins; at most
one ValidationError is produced per row:

1. email present and shaped like local@domain.tld
2. date present and lexically DD/MM/YYYY
3. date is a real calendar date (31/02/2025 is rejected)
4. year within [2000, 2100]
5. amount finite and within [0, 100000]
6. type present and at most 50 characters (trimmed)
7. status one of paid|pending|failed (case-insensitive, trimmed)
"""

__all__ = [
    "AMOUNT_MAX",
    "AMOUNT_MIN",
    "TYPE_MAX_LENGTH",
    "YEAR_MAX",
    "YEAR_MIN",
    "canonicalize",
    "validate_row",
]

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_RE = re.compile(r"^([0-9]{2})/([0-9]{2})/([0-9]{4})$")

YEAR_MIN = 2000
YEAR_MAX = 2100
AMOUNT_MIN = 0
AMOUNT_MAX = 100_000
TYPE_MAX_LENGTH = 50


def _text(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    return "" if value is None else str(value).strip()


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        if isinstance(value, (int, float)):
            return float(value)
        text = str(value).strip()
        return float(text) if is_numeric_text(text) else None
    except (ValueError, OverflowError):
        # int 桁あふれは範囲外として扱う
        return None


def _check_date(raw: str) -> str | None:
    """Return an error message for the date or None when it is valid."""
    if not raw:
        return "Date is required."
    m = DATE_RE.match(raw)
    if m is None:
        return f'Invalid date format "{raw}". Expected DD/MM/YYYY.'
    day, month, year = (int(p) for p in m.groups())
    # 部品から日付を再構成し、日/月/年が一致することを確認
    try:
        built = date(year, month, day)
    except ValueError:
        built = None
    if built is None or (built.day, built.month, built.year) != (day, month, year):
        return f'Invalid calendar date "{raw}".'
    if not YEAR_MIN <= year <= YEAR_MAX:
        return f"Year must be between {YEAR_MIN} and {YEAR_MAX}."
    return None


def validate_row(row: Mapping[str, Any], row_number: int) -> ValidationError | None:
    """Validate one normalized row.

    Args:
        row: Normalized row mapping (see tabular.reader.normalize_record)
        row_number: Human row number (header offset included)

    Returns:
        ValidationError for the first failing rule, or None when the row passes
    """
    email = _text(row, "email")
    if not email:
        return ValidationError(row_number, "Email is required.")
    if not EMAIL_RE.match(email):
        return ValidationError(row_number, f'Invalid email "{email}".')

    date_error = _check_date(_text(row, "date"))
    if date_error is not None:
        return ValidationError(row_number, date_error)

    amount = _as_number(row.get("amount"))
    if amount is None or not math.isfinite(amount) or not AMOUNT_MIN <= amount <= AMOUNT_MAX:
        return ValidationError(
            row_number, f"Amount must be a number between {AMOUNT_MIN} and {AMOUNT_MAX}."
        )

    txn_type = _text(row, "type")
    if not txn_type:
        return ValidationError(row_number, "Type is required.")
    if len(txn_type) > TYPE_MAX_LENGTH:
        return ValidationError(row_number, f"Type must be {TYPE_MAX_LENGTH} characters or less.")

    status = _text(row, "status").lower()
    if status not in TransactionStatus.values():
        shown = _text(row, "status")
        return ValidationError(
            row_number, f'Invalid status "{shown}". Must be paid, pending or failed.'
        )
    return None


def canonicalize(row: Mapping[str, Any]) -> ImportRow:
    """Canonical form of a row that passed validate_row()."""
    amount = _as_number(row.get("amount"))
    if amount is None:
        raise ValueError("canonicalize() called on a row without a numeric amount")
    return ImportRow(
        email=_text(row, "email").lower(),
        date=_text(row, "date"),
        amount=int(amount) if amount.is_integer() else amount,
        type=_text(row, "type"),
        status=_text(row, "status").lower(),
    )
