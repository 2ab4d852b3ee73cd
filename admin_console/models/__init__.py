"""Domain models for the marketplace admin console.

This package contains the value types shared by the import pipeline,
the API client and the session gate.
"""

from .error_record import ErrorRecord, ErrorType
from .import_result import ImportPhase, ImportResult, SubmitOutcome
from .import_row import EXPECTED_COLUMNS, ImportRow, TransactionStatus
from .lookup import NOT_FOUND, Found, LookupResult, NotFound
from .session import AuthDecision, CurrentUser, SessionEntry
from .validation_error import HEADER_OFFSET, ValidationError, human_row_number

__all__ = [
    # Import pipeline
    "EXPECTED_COLUMNS",
    "ImportRow",
    "TransactionStatus",
    "ValidationError",
    "HEADER_OFFSET",
    "human_row_number",
    "ImportPhase",
    "ImportResult",
    "SubmitOutcome",
    "ErrorRecord",
    "ErrorType",
    # Identity lookup
    "Found",
    "NotFound",
    "NOT_FOUND",
    "LookupResult",
    # Session
    "AuthDecision",
    "CurrentUser",
    "SessionEntry",
]
