"""Runs orchestrator operations against the inbound request deadline."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from app.schemas.outcome import OrchestratorOutcome, OutcomeKind

logger = logging.getLogger(__name__)


class RequestDeadlineExceeded(Exception):
    """The caller's deadline passed while the operation was still running."""

    def __init__(self, description: str, timeout: float) -> None:
        super().__init__(f"{description} exceeded the {timeout:.1f}s request deadline")
        self.description = description
        self.timeout = timeout


class DeadlineRunner:
    """Bounds how long a caller waits, never how long the operation runs.

    A timed-out operation keeps running so the catalogues are left consistent;
    its late outcome has no caller left and is only logged.
    """

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        self._orphans: set[asyncio.Task[OrchestratorOutcome]] = set()

    @property
    def orphan_count(self) -> int:
        return len(self._orphans)

    async def run(
        self,
        operation: Coroutine[Any, Any, OrchestratorOutcome],
        *,
        description: str,
    ) -> OrchestratorOutcome:
        task = asyncio.create_task(operation, name=description)
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("%s still running after %.1fs; detaching from request", description, self.timeout)
            self._detach(task)
            raise RequestDeadlineExceeded(description, self.timeout) from exc
        except asyncio.CancelledError:
            logger.warning("%s lost its caller; detaching from request", description)
            self._detach(task)
            raise

    async def drain(self) -> None:
        """Wait for detached operations, e.g. on application shutdown."""
        if self._orphans:
            await asyncio.gather(*list(self._orphans), return_exceptions=True)

    def _detach(self, task: asyncio.Task[OrchestratorOutcome]) -> None:
        self._orphans.add(task)
        task.add_done_callback(self._log_orphan)

    def _log_orphan(self, task: asyncio.Task[OrchestratorOutcome]) -> None:
        self._orphans.discard(task)
        if task.cancelled():
            logger.error("%s was cancelled after its request timed out", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error("%s failed after its request timed out", task.get_name(), exc_info=exc)
            return
        outcome = task.result()
        log = logger.error if outcome.kind is OutcomeKind.UNRECOVERABLE else logger.info
        log(
            "%s completed after its request timed out: status=%s kind=%s",
            task.get_name(),
            outcome.status_code,
            outcome.kind.value,
        )
