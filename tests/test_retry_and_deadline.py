"""Unit tests for the CENTRAL retry policy and the request deadline runner."""

from __future__ import annotations

import asyncio
import unittest

from app.schemas.catalogue import CatalogueType
from app.schemas.outcome import OperationState, OrchestratorOutcome, OutcomeKind
from app.services.deadline import DeadlineRunner, RequestDeadlineExceeded
from app.services.errors import CatalogueError, CatalogueNotFound, CatalogueUnavailable
from app.services.retry import RetryPolicy


class FlakyCall:
    """Callable failing with the queued errors before succeeding."""

    def __init__(self, errors: list[CatalogueError]) -> None:
        self.errors = list(errors)
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


def _outcome() -> OrchestratorOutcome:
    return OrchestratorOutcome(
        status_code=200,
        body={"id": "abc-1"},
        kind=OutcomeKind.SUCCESS,
        state=OperationState.CENTRAL_WRITTEN,
    )


class RetryPolicyTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.policy = RetryPolicy(attempts=3, base_delay=0.0, max_delay=0.0)

    async def test_transient_failures_are_retried(self) -> None:
        call = FlakyCall(
            [
                CatalogueUnavailable("down", catalogue_type=CatalogueType.CENTRAL),
                CatalogueError("busy", catalogue_type=CatalogueType.CENTRAL, status_code=503),
            ]
        )

        result = await self.policy.run(call, description="CENTRAL create")

        self.assertEqual(result, "ok")
        self.assertEqual(call.calls, 3)

    async def test_rejections_are_not_retried(self) -> None:
        call = FlakyCall([CatalogueNotFound("missing", catalogue_type=CatalogueType.CENTRAL)])

        with self.assertRaises(CatalogueNotFound):
            await self.policy.run(call, description="CENTRAL delete")

        self.assertEqual(call.calls, 1)

    async def test_last_error_is_raised_when_budget_is_spent(self) -> None:
        errors = [
            CatalogueError(f"fail {n}", catalogue_type=CatalogueType.CENTRAL, status_code=500) for n in range(3)
        ]
        call = FlakyCall(errors)

        with self.assertRaises(CatalogueError) as ctx:
            await self.policy.run(call, description="CENTRAL update")

        self.assertEqual(str(ctx.exception), "fail 2")
        self.assertEqual(call.calls, 3)

    def test_backoff_is_exponential_and_capped(self) -> None:
        policy = RetryPolicy(attempts=5, base_delay=0.5, max_delay=4.0)

        self.assertEqual([policy.delay_for(n) for n in range(5)], [0.5, 1.0, 2.0, 4.0, 4.0])


class DeadlineRunnerTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_fast_operation_returns_outcome(self) -> None:
        runner = DeadlineRunner(timeout=1.0)

        async def operation() -> OrchestratorOutcome:
            return _outcome()

        outcome = await runner.run(operation(), description="get item 'abc-1'")

        self.assertEqual(outcome.status_code, 200)
        self.assertEqual(runner.orphan_count, 0)

    async def test_slow_operation_keeps_running_after_deadline(self) -> None:
        runner = DeadlineRunner(timeout=0.01)
        release = asyncio.Event()
        finished: list[OrchestratorOutcome] = []

        async def operation() -> OrchestratorOutcome:
            await release.wait()
            finished.append(_outcome())
            return finished[-1]

        with self.assertRaises(RequestDeadlineExceeded):
            await runner.run(operation(), description="delete item 'abc-1'")

        self.assertEqual(runner.orphan_count, 1)
        release.set()
        with self.assertLogs("app.services.deadline", level="INFO") as logs:
            await runner.drain()
            await asyncio.sleep(0)

        self.assertEqual(len(finished), 1)
        self.assertEqual(runner.orphan_count, 0)
        self.assertIn("completed after its request timed out", logs.output[-1])

    async def test_orphan_failure_is_logged_not_raised(self) -> None:
        runner = DeadlineRunner(timeout=0.01)
        release = asyncio.Event()

        async def operation() -> OrchestratorOutcome:
            await release.wait()
            raise RuntimeError("catalogue client closed")

        with self.assertRaises(RequestDeadlineExceeded):
            await runner.run(operation(), description="update item 'abc-1'")

        release.set()
        with self.assertLogs("app.services.deadline", level="ERROR") as logs:
            await runner.drain()
            await asyncio.sleep(0)

        self.assertIn("failed after its request timed out", logs.output[-1])


if __name__ == "__main__":
    unittest.main()
