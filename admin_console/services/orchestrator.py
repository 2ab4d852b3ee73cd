from __future__ import annotations

import asyncio
import logging
import re
import time
from pathlib import Path

from ..api.bulk_submit import BulkSubmitter
from ..api.client import AdminApiError, AdminTransportError
from ..auth.session_gate import NotAuthenticatedError
from ..config.loader import ImportSettings
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorType
from ..models.import_result import ImportPhase, ImportResult
from ..models.import_row import ImportRow
from ..models.validation_error import human_row_number
from ..tabular.reader import FileLevelError, normalize_record, read_upload
from .identity import IdentityCache, IdentityResolver, UserStore
from .progress import RowProgress
from .validator import canonicalize, validate_row

"""Import orchestration for transaction uploads.

Sequence: parse -> validate (+ optional user lookup) -> one bulk submit.

- File-level failures (bad extension, unreadable, no sheets, no data rows,
  too many rows) end the run with a single error and nothing submitted.
- Row-level failures are collected, never raised; one bad row never aborts
  the batch. Individual messages stop after `max_reported_errors`, followed
  by one "...and N more errors" marker.
- When no row survives validation the submit call is skipped.
- Final errors = client-side errors (input order) ++ server errors.
"""

__all__ = [
    "ImportOrchestrator",
]

logger = logging.getLogger(__name__)

_SERVER_ROW_RE = re.compile(r"^Row (\d+):")


class _ErrorCollector:
    """Ordered, capped list of client-side error messages."""

    def __init__(self, cap: int) -> None:
        self._cap = cap
        self._messages: list[str] = []
        self.total = 0

    def add(self, message: str) -> None:
        self.total += 1
        if len(self._messages) < self._cap:
            self._messages.append(message)

    def messages(self) -> tuple[str, ...]:
        hidden = self.total - len(self._messages)
        if hidden > 0:
            return (*self._messages, f"...and {hidden} more errors")
        return tuple(self._messages)


class ImportOrchestrator:
    """Runs one upload through the pipeline and produces an ImportResult.

    Args:
        submitter: Bulk submitter for the validated rows
        user_store: When given, each distinct email is resolved (once per run)
            and rows for unknown users are reported instead of submitted
        settings: Row ceiling / error cap
        error_log: JSON Lines buffer; flushed at the end of every run
    """

    def __init__(
        self,
        submitter: BulkSubmitter,
        *,
        user_store: UserStore | None = None,
        settings: ImportSettings | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self._submitter = submitter
        self._user_store = user_store
        self._settings = settings if settings is not None else ImportSettings()
        self._error_log = error_log if error_log is not None else ErrorLogBuffer()
        self.phase = ImportPhase.IDLE
        self.parsed_rows = 0
        self.elapsed_seconds = 0.0
        self.aborted = False  # last run ended on a file-level or transport failure
        self.last_result: ImportResult | None = None
        self.last_resolver: IdentityResolver | None = None

    async def run(self, path: Path) -> ImportResult:
        start = time.perf_counter()
        self.parsed_rows = 0
        self.aborted = False
        try:
            result = await self._run(path)
        finally:
            self.phase = ImportPhase.DONE
            self.elapsed_seconds = time.perf_counter() - start
            self._flush_error_log()
        self.last_result = result
        return result

    async def _run(self, path: Path) -> ImportResult:
        file_name = path.name

        # --- Parsing ---------------------------------------------------
        self.phase = ImportPhase.PARSING
        try:
            records = await asyncio.to_thread(read_upload, path)
        except FileLevelError as e:
            return self._fatal(file_name, str(e))

        self.parsed_rows = len(records)
        max_rows = self._settings.max_rows
        if not records:
            return self._fatal(file_name, "File contains no data rows.")
        if len(records) > max_rows:
            return self._fatal(file_name, f"File has {len(records)} rows. Maximum is {max_rows} per upload.")
        logger.info(f"import: {file_name} parsed rows={len(records)}")

        # --- Validating ------------------------------------------------
        self.phase = ImportPhase.VALIDATING
        errors = _ErrorCollector(self._settings.max_reported_errors)
        valid_rows: list[ImportRow] = []
        resolver = None
        if self._user_store is not None:
            # per-run cache: discarded with the resolver when the run ends
            resolver = IdentityResolver(self._user_store, IdentityCache())
        self.last_resolver = resolver

        with RowProgress(len(records)) as progress:
            for index, raw in enumerate(records):
                progress.advance()
                row_number = human_row_number(index)
                row = normalize_record(raw)
                failure = validate_row(row, row_number)
                if failure is not None:
                    errors.add(str(failure))
                    self._record(file_name, row_number, ErrorType.INVALID_ROW, failure.message)
                    continue

                clean = canonicalize(row)
                if resolver is not None:
                    try:
                        found = await resolver.resolve(clean.email)
                    except (AdminApiError, AdminTransportError, NotAuthenticatedError) as e:
                        return self._fatal(file_name, f"User lookup failed: {e}", ErrorType.TRANSPORT_ERROR)
                    if not found:
                        message = f'User with email "{clean.email}" not found.'
                        errors.add(f"Row {row_number}: {message}")
                        self._record(file_name, row_number, ErrorType.USER_NOT_FOUND, message)
                        continue
                valid_rows.append(clean)
            progress.set_postfix(valid=len(valid_rows), errors=errors.total)

        client_errors = errors.messages()
        if errors.total:
            logger.warning(f"import: {file_name} rejected rows={errors.total}")
        if not valid_rows:
            logger.info(f"import: {file_name} no valid rows, submit skipped")
            return ImportResult(success_count=0, errors=client_errors)

        # --- Submitting ------------------------------------------------
        self.phase = ImportPhase.SUBMITTING
        outcome = await self._submitter.submit(valid_rows)
        if outcome.transport_failed:
            self.aborted = True
        for message in outcome.errors:
            if outcome.transport_failed:
                self._record(file_name, -1, ErrorType.TRANSPORT_ERROR, message)
            else:
                m = _SERVER_ROW_RE.match(message)
                server_row = int(m.group(1)) if m else -1
                self._record(file_name, server_row, ErrorType.SERVER_REJECTED, message)
        logger.info(f"import: {file_name} submitted rows={len(valid_rows)} accepted={outcome.success}")
        return ImportResult(success_count=outcome.success, errors=client_errors + outcome.errors)

    def _fatal(self, file_name: str, message: str, error_type: str = ErrorType.FILE_LEVEL) -> ImportResult:
        logger.error(f"import: {file_name}: {message}")
        self.aborted = True
        self._record(file_name, -1, error_type, message)
        return ImportResult.failed(message)

    def _record(self, file_name: str, row: int, error_type: str, message: str) -> None:
        self._error_log.add(file_name, row, error_type, message)

    def _flush_error_log(self) -> None:
        try:
            path = self._error_log.flush()
        except OSError as e:
            logger.warning(f"import: failed writing error log: {e}")
            return
        if path is not None:
            logger.debug(f"import: error log written to {path}")
