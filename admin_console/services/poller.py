from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TypeVar

from ..api.client import AdminApiError, AdminTransportError
from ..api.endpoints import AdminEndpoints, payout_owner
from ..auth.session_gate import NotAuthenticatedError

"""Payout queue polling.

A cancellable repeating task owned by whoever owns the payouts screen:
started on activation, cancelled on deactivation. Ticks that fall while a
mutating action (approve / reject / complete) is outstanding are skipped.
Fetch failures are logged and polling continues; an unexpected error in
one tick is logged with its traceback and the next tick still runs.
"""

__all__ = [
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "PayoutQueuePoller",
    "PayoutSnapshot",
]

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 10.0

T = TypeVar("T")


@dataclass(frozen=True)
class PayoutSnapshot:
    pending: list[dict[str, Any]] = field(default_factory=list)
    history: list[dict[str, Any]] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class PayoutQueuePoller:
    def __init__(
        self,
        endpoints: AdminEndpoints,
        *,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        on_update: Callable[[PayoutSnapshot], None] | None = None,
    ) -> None:
        self._endpoints = endpoints
        self.interval_seconds = interval_seconds
        self._on_update = on_update
        self._task: asyncio.Task[None] | None = None
        self._actions_in_flight = 0
        self.snapshot: PayoutSnapshot | None = None
        self.ticks = 0
        self.skipped_ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def paused(self) -> bool:
        return self._actions_in_flight > 0

    async def refresh(self) -> PayoutSnapshot | None:
        """Fetch queue + history once. Returns None when the fetch failed."""
        try:
            pending = await self._endpoints.payout_queue()
            history = await self._endpoints.payout_history()
        except (AdminApiError, AdminTransportError, NotAuthenticatedError) as e:
            logger.warning(f"payouts: refresh failed: {e}")
            return None
        snapshot = PayoutSnapshot(pending=pending, history=history)
        self.snapshot = snapshot
        if self._on_update is not None:
            self._on_update(snapshot)
        return snapshot

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.ticks += 1
            if self.paused:
                self.skipped_ticks += 1
                logger.debug("payouts: tick skipped (action in flight)")
                continue
            try:
                await self.refresh()
            except Exception:
                logger.exception("payouts: unexpected error during refresh")

    async def run_action(self, action: Awaitable[T]) -> T:
        """Run a mutating call with polling suspended, then refresh once."""
        self._actions_in_flight += 1
        try:
            result = await action
        finally:
            self._actions_in_flight -= 1
        await self.refresh()
        return result

    async def approve(self, payout: dict[str, Any]) -> Any:
        return await self.run_action(self._endpoints.approve_payout(str(payout["id"]), payout_owner(payout)))

    async def reject(self, payout: dict[str, Any]) -> Any:
        return await self.run_action(self._endpoints.reject_payout(str(payout["id"]), payout_owner(payout)))

    async def complete(self, payout: dict[str, Any]) -> Any:
        return await self.run_action(self._endpoints.complete_payout(str(payout["id"]), payout_owner(payout)))
