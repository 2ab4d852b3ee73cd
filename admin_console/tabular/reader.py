from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.import_row import EXPECTED_COLUMNS

"""Upload reader and row normalizer.

Reads a transaction upload (delimited text or spreadsheet workbook) into raw
records keyed by the file's own header names, and normalizes one raw record
into the fixed lowercase row shape {email, date, amount, type, status}.

- Header row is the first row; data starts on the second (row number 2).
- Workbooks: first sheet only.
- Absent fields normalize to "" (amount to 0); the validator decides.
"""

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "FileLevelError",
    "UnsupportedFileError",
    "UnreadableFileError",
    "EmptyFileError",
    "NoSheetsError",
    "read_upload",
    "normalize_record",
    "is_numeric_text",
]

SUPPORTED_EXTENSIONS: tuple[str, ...] = (".csv", ".xlsx", ".xls")
DATE_OUTPUT_FMT = "%d/%m/%Y"
# 表計算ソフトの数値表記のみ (ASCII 数字, "_" 区切りなし)
NUMBER_RE = re.compile(r"^[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")


class FileLevelError(Exception):
    """Failure that invalidates the whole upload before row processing."""


class UnsupportedFileError(FileLevelError):
    """Raised when the upload extension is not one of SUPPORTED_EXTENSIONS."""


class UnreadableFileError(FileLevelError):
    """Raised when the file cannot be opened or parsed."""


class EmptyFileError(FileLevelError):
    """Raised when the file has no content at all."""


class NoSheetsError(FileLevelError):
    """Raised when a workbook contains zero sheets."""


def read_upload(path: Path) -> list[dict[str, Any]]:
    """Read an upload returning raw records (header name -> cell text).

    Parameters
    ----------
    path: アップロードファイルパス (.csv / .xlsx / .xls)

    Fully blank rows are dropped. Header names are returned as found in the
    file; use normalize_record() to map them onto the fixed row shape.
    """
    ext = path.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        shown = ext or path.name
        raise UnsupportedFileError(f'Unsupported file type "{shown}". Use .csv, .xlsx or .xls.')

    try:
        size = path.stat().st_size
    except OSError as e:
        raise UnreadableFileError(f"Could not read file: {e}") from e
    if size == 0:
        raise EmptyFileError("File is empty.")

    if ext == ".csv":
        df = _read_csv(path)
    else:
        df = _read_workbook(path)
    return _frame_to_records(df)


def _read_csv(path: Path) -> pd.DataFrame:
    # 全セル文字列として読み込み、NA 変換は行わない
    options: dict[str, Any] = {
        "dtype": str,
        "keep_default_na": False,
        "skip_blank_lines": True,
    }
    try:
        try:
            return pd.read_csv(path, encoding="utf-8-sig", **options)
        except UnicodeDecodeError:
            return pd.read_csv(path, encoding="latin-1", **options)
    except pd.errors.EmptyDataError as e:
        raise EmptyFileError("File is empty.") from e
    except (pd.errors.ParserError, OSError) as e:
        raise UnreadableFileError(f"Could not parse CSV: {e}") from e


def _read_workbook(path: Path) -> pd.DataFrame:
    try:
        xls = pd.ExcelFile(path)
    except Exception as e:  # openpyxl / xlrd raise their own error types
        raise UnreadableFileError(f"Could not open workbook: {e}") from e
    if not xls.sheet_names:
        raise NoSheetsError("Workbook contains no sheets.")
    first = xls.sheet_names[0]
    try:
        return xls.parse(first, dtype=object, keep_default_na=False)
    except Exception as e:
        raise UnreadableFileError(f"Could not read sheet '{first}': {e}") from e


def _frame_to_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    columns = [str(c) for c in df.columns]
    records: list[dict[str, Any]] = []
    for raw in df.itertuples(index=False, name=None):
        record = {col: _cell_text(val) for col, val in zip(columns, raw, strict=False)}
        # 空行はスキップ (区切りテキスト側の skip_blank_lines と揃える)
        if all(v.strip() == "" for v in record.values()):
            continue
        records.append(record)
    return records


def _cell_text(value: Any) -> str:
    """Render one cell as text the validator understands."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (datetime, date)):
        if pd.isna(value):  # NaT
            return ""
        return value.strftime(DATE_OUTPUT_FMT)
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def normalize_record(raw: Mapping[Any, Any]) -> dict[str, Any]:
    """Normalize one raw record into the fixed row shape.

    Header matching is case-insensitive and whitespace-trimmed. Pure function:
    the same input always yields the same output.

    Returns:
        {"email": str, "date": str, "amount": int | float, "type": str, "status": str}
        amount is 0 when absent/blank and NaN when not numeric.
    """
    lowered = {str(k).strip().lower(): v for k, v in raw.items()}
    row: dict[str, Any] = {}
    for col in EXPECTED_COLUMNS:
        if col == "amount":
            row[col] = _coerce_amount(lowered.get(col))
        else:
            row[col] = _cell_text(lowered.get(col))
    return row


def _coerce_amount(value: Any) -> int | float:
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return value
    text = _cell_text(value).strip()
    if text == "":
        return 0
    if not is_numeric_text(text):
        return math.nan
    if text.lstrip("+-").isdigit():
        try:
            return int(text)
        except ValueError:
            # int 変換の桁数上限を超えた場合は inf になり範囲外で弾かれる
            return float(text)
    return float(text)


def is_numeric_text(text: str) -> bool:
    return NUMBER_RE.match(text) is not None
