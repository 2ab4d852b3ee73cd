from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from ..auth.session_gate import NotAuthenticatedError
from ..models.import_result import SubmitOutcome
from ..models.import_row import ImportRow
from .client import AdminApiClient, AdminApiError, AdminTransportError

"""Bulk submitter for validated transaction rows.

All rows go out in one POST /admin/transactions/bulk request with body
{"rows": [...]}; the backend answers {"success": int, "errors": [str]}.
There is no partial retry: a failed call fails the whole submission and is
reported as a single error.
"""

__all__ = [
    "BULK_PATH",
    "BulkSubmitter",
    "SubmitMetrics",
]

logger = logging.getLogger(__name__)

BULK_PATH = "/admin/transactions/bulk"

_UNEXPECTED_RESPONSE = SubmitOutcome(
    success=0, errors=("Upload failed: unexpected response from server",), transport_failed=True
)


@dataclass(frozen=True)
class SubmitMetrics:
    """Timing of one bulk call."""
    row_count: int
    elapsed_seconds: float
    ok: bool


class BulkSubmitter:
    def __init__(
        self,
        client: AdminApiClient,
        *,
        metrics_callback: Callable[[SubmitMetrics], None] | None = None,
    ) -> None:
        self._client = client
        self._metrics_callback = metrics_callback

    async def submit(self, rows: Sequence[ImportRow]) -> SubmitOutcome:
        """Send every row in one request.

        Note: if `rows` is empty nothing is sent and the metrics callback is
        not invoked.
        """
        if not rows:
            return SubmitOutcome(success=0)

        body = {"rows": [r.to_payload() for r in rows]}
        start = time.perf_counter()
        ok = False
        try:
            data = await self._client.post(BULK_PATH, json=body)
            ok = True
        except (AdminApiError, AdminTransportError, NotAuthenticatedError) as e:
            message = e.message if isinstance(e, AdminApiError) else str(e)
            logger.error(f"bulk submit failed rows={len(rows)}: {message}")
            return SubmitOutcome(success=0, errors=(f"Upload failed: {message}",), transport_failed=True)
        finally:
            if self._metrics_callback is not None:
                self._metrics_callback(
                    SubmitMetrics(
                        row_count=len(rows),
                        elapsed_seconds=time.perf_counter() - start,
                        ok=ok,
                    )
                )
        return _parse_outcome(data)


def _parse_outcome(data: Any) -> SubmitOutcome:
    if not isinstance(data, dict):
        return _UNEXPECTED_RESPONSE
    try:
        success = int(data.get("success", 0))
    except (TypeError, ValueError):
        return _UNEXPECTED_RESPONSE
    raw_errors = data.get("errors") or []
    if isinstance(raw_errors, str):
        raw_errors = [raw_errors]
    errors = tuple(str(e) for e in raw_errors)
    return SubmitOutcome(success=success, errors=errors)
