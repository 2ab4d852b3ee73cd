from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the import error log.

Each record is one JSON Lines entry. row=-1 is the sentinel for file-level
errors where no single row is at fault (bad extension, row ceiling,
transport failure).
"""

__all__ = [
    "ErrorRecord",
    "ErrorType",
]


class ErrorType:
    """error_type values (UPPER_SNAKE)."""
    FILE_LEVEL = "FILE_LEVEL"
    INVALID_ROW = "INVALID_ROW"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    SERVER_REJECTED = "SERVER_REJECTED"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Uploaded file name
        row: Row number (1-based, header included). -1 for file-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str
    file: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
