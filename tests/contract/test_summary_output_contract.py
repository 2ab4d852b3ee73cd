from __future__ import annotations

import re

from admin_console.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL
from admin_console.models.import_result import ImportResult
from admin_console.services.summary import render_summary_line

"""SUMMARY line and exit code contract."""

SUMMARY_RE = re.compile(
    r"^SUMMARY file=(?P<file>\S+) rows=(?P<rows>\d+) success=(?P<success>\d+) "
    r"errors=(?P<errors>\d+) elapsed_sec=(?P<elapsed>\d+(\.\d+)?)$"
)


def test_summary_line_format():
    line = render_summary_line("big.xlsx", 1001, ImportResult.failed("too many"), 0.25)

    m = SUMMARY_RE.match(line)
    assert m is not None
    assert m.group("rows") == "1001"
    assert m.group("success") == "0"
    assert m.group("errors") == "1"


def test_exit_codes():
    assert (EXIT_SUCCESS_ALL, EXIT_PARTIAL_FAILURE, EXIT_FATAL) == (0, 2, 1)
