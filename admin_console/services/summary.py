from __future__ import annotations

from ..models.import_result import ImportResult

"""SUMMARY line rendering for an import run."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(file_name: str, parsed_rows: int, result: ImportResult, elapsed_seconds: float) -> str:
    """Render the SUMMARY line for one import run.

    Format:
    SUMMARY file={name} rows={parsed} success={success} errors={n} elapsed_sec={elapsed}

    Examples:
        >>> r = ImportResult(success_count=2, errors=("Row 3: Email is required.",))
        >>> render_summary_line("tx.csv", 3, r, 1.5)
        'SUMMARY file=tx.csv rows=3 success=2 errors=1 elapsed_sec=1.5'
    """
    return (
        f"SUMMARY file={file_name} "
        f"rows={parsed_rows} "
        f"success={result.success_count} "
        f"errors={len(result.errors)} "
        f"elapsed_sec={_format_seconds(elapsed_seconds)}"
    )
