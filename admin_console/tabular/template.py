from __future__ import annotations

from pathlib import Path

import pandas as pd

from ..models.import_row import EXPECTED_COLUMNS
from .reader import UnsupportedFileError

"""Upload template generation (.csv / .xlsx).

The template has exactly the expected columns and three example rows.
"""

__all__ = [
    "TEMPLATE_ROWS",
    "template_frame",
    "write_template",
]

TEMPLATE_ROWS: list[list[object]] = [
    ["john@example.com", "15/01/2025", 50, "credit_purchase", "paid"],
    ["jane@example.com", "20/01/2025", 100, "subscription", "Pending"],
    ["alex@example.com", "01/02/2025", 25, "refund", "failed"],
]


def template_frame() -> pd.DataFrame:
    return pd.DataFrame(TEMPLATE_ROWS, columns=list(EXPECTED_COLUMNS))


def write_template(path: Path) -> Path:
    """Write the template to path; format follows the extension."""
    ext = path.suffix.lower()
    df = template_frame()
    if ext == ".csv":
        df.to_csv(path, index=False)
    elif ext == ".xlsx":
        df.to_excel(path, sheet_name="Transactions", index=False, engine="openpyxl")
    else:
        raise UnsupportedFileError(f'Cannot write template as "{ext or path.name}". Use .csv or .xlsx.')
    return path
