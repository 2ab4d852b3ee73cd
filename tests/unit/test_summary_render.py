from __future__ import annotations

import pytest

from admin_console.models.import_result import ImportResult
from admin_console.services.summary import render_summary_line


def test_render_summary_line_basic() -> None:
    result = ImportResult(success_count=2, errors=("Row 3: Email is required.",))

    line = render_summary_line("tx.csv", 3, result, 1.5)

    assert line == "SUMMARY file=tx.csv rows=3 success=2 errors=1 elapsed_sec=1.5"


@pytest.mark.parametrize(
    "elapsed,expected",
    [(0, "0"), (2.0, "2"), (1.23456, "1.235"), (0.0012, "0.0012")],
)
def test_elapsed_formatting(elapsed: float, expected: str) -> None:
    line = render_summary_line("a.csv", 0, ImportResult.failed("File is empty."), elapsed)

    assert line.endswith(f"elapsed_sec={expected}")
    assert "errors=1" in line
