from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord, ErrorType

"""Import error log (JSON Lines).

Records collected during an import run are kept in memory and written in one
go when the run ends. The target is `logs/import-errors-YYYYMMDD-HHMMSS.log`
(UTC); the name is fixed on the first write, so later runs in the same
process append to the same file. Nothing is created for a clean run.
"""

__all__ = [
    "ErrorLogBuffer",
    "ErrorRecord",
    "ErrorType",
]

LOGS_DIR = Path("./logs")
FILE_STAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Buffered JSON Lines writer for ErrorRecord entries."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self.logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._pending: list[ErrorRecord] = []
        self._target: Path | None = None

    def _log_path(self) -> Path:
        if self._target is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(FILE_STAMP_FMT)
            self._target = self.logs_dir / f"import-errors-{stamp}.log"
        return self._target

    @property
    def file_path(self) -> Path | None:
        """Log file written so far (None before the first flush that wrote anything)."""
        return self._target

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def add(self, file: str, row: int, error_type: str, message: str) -> ErrorRecord:
        record = ErrorRecord.create(file=file, row=row, error_type=error_type, message=message)
        self._pending.append(record)
        return record

    def records(self) -> list[ErrorRecord]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def flush(self) -> Path | None:
        """Append pending records to the log file and return its path.

        Returns None (and touches nothing on disk) when no record is pending.
        """
        if not self._pending:
            return None
        path = self._log_path()
        payload = "".join(f"{r.to_json_line()}\n" for r in self._pending)
        with path.open("a", encoding="utf-8") as f:
            f.write(payload)
        self._pending = []
        return path
