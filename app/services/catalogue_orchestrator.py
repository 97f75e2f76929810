"""Sequences item writes across the LOCAL and CENTRAL catalogues."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from app.interfaces.catalogue_client import CatalogueClient
from app.schemas.catalogue import CatalogueType, Item, OperationResult, strip_backend_fields
from app.schemas.errors import ErrorResponse
from app.schemas.outcome import OperationState, OrchestratorOutcome, OutcomeKind
from app.services.divergence_recorder import DivergenceRecorderProtocol, InMemoryDivergenceRecorder
from app.services.errors import CatalogueConflict, CatalogueError, CatalogueNotFound, DivergenceDetected
from app.services.retry import RetryPolicy

logger = logging.getLogger(__name__)

# Where an item is left when compensation for each operation fails.
DIVERGED_CATALOGUE_STATE = {
    "create": "present_in_local_only",
    "update": "local_ahead_of_central",
    "delete": "absent_from_local_only",
}

CREATE_RETRY_MESSAGE = "Upload failed, try again later"
UPDATE_RETRY_MESSAGE = "Update failed, try again later"

Compensation = Callable[[], Awaitable[OrchestratorOutcome]]


class CatalogueOrchestrator:
    """Writes LOCAL first, then CENTRAL, and repairs a failed CENTRAL write.

    Every public operation returns exactly one ``OrchestratorOutcome``.
    Catalogue failures never escape as exceptions; anything else propagates.
    """

    def __init__(
        self,
        local: CatalogueClient,
        central: CatalogueClient,
        *,
        retry_policy: RetryPolicy | None = None,
        divergence_recorder: DivergenceRecorderProtocol | None = None,
    ) -> None:
        self.local = local
        self.central = central
        self.retry_policy = retry_policy or RetryPolicy()
        self.divergence_recorder = divergence_recorder or InMemoryDivergenceRecorder()

    async def create_item(self, item: Item, token: str) -> OrchestratorOutcome:
        """INIT -> LOCAL_WRITTEN -> CENTRAL_WRITTEN, or DIVERGED -> RESTORED | UNRECOVERABLE."""
        self._enter("create", item.get("id"), OperationState.INIT)
        try:
            local_result = await self.local.create_item(item, token)
        except CatalogueError as exc:
            return self._local_failure("create", item.get("id"), exc, OperationState.INIT)

        local_item = local_result.first_item() or {}
        item_id = _item_id(local_item)
        self._enter("create", item_id, OperationState.LOCAL_WRITTEN)
        logger.debug("item uploaded in local cat %s", local_item)

        if item_id is None:
            missing_id = CatalogueError(
                "LOCAL create returned no item id",
                catalogue_type=CatalogueType.LOCAL,
                body=local_result.results,
            )
            return await self._compensate_or_report(
                DivergenceDetected("create", None, missing_id),
                lambda: self._remove_local_copy(None, token),
            )

        try:
            central_result = await self._central(
                "create", item_id, lambda: self.central.create_item(local_item, token)
            )
        except CatalogueConflict as exc:
            return await self._resolve_central_conflict(item_id, token, exc)
        except CatalogueError as exc:
            return await self._compensate_or_report(
                DivergenceDetected("create", item_id, exc),
                lambda: self._remove_local_copy(item_id, token),
            )

        self._enter("create", item_id, OperationState.CENTRAL_WRITTEN)
        return OrchestratorOutcome(
            status_code=201,
            body=central_result.results,
            kind=OutcomeKind.SUCCESS,
            state=OperationState.CENTRAL_WRITTEN,
        )

    async def update_item(self, item: Item, token: str) -> OrchestratorOutcome:
        """INIT -> SNAPSHOT_TAKEN -> LOCAL_WRITTEN -> CENTRAL_WRITTEN, or DIVERGED -> RESTORED | UNRECOVERABLE."""
        item_id = _item_id(item)
        self._enter("update", item_id, OperationState.INIT)
        if item_id is None:
            return OrchestratorOutcome(
                status_code=400,
                body=ErrorResponse.for_status(400, "Item id is required for update").model_dump(),
                kind=OutcomeKind.LOCAL_WRITE_FAILURE,
                state=OperationState.INIT,
            )

        # The pre-update value is what LOCAL is reverted to if CENTRAL fails.
        try:
            previous = (await self.local.get_item(item_id)).first_item()
        except CatalogueError as exc:
            return self._local_failure("update", item_id, exc, OperationState.INIT)
        if previous is None:
            return OrchestratorOutcome(
                status_code=404,
                body=ErrorResponse.for_status(404, f"Item '{item_id}' not found").model_dump(),
                kind=OutcomeKind.LOCAL_WRITE_FAILURE,
                state=OperationState.INIT,
            )
        self._enter("update", item_id, OperationState.SNAPSHOT_TAKEN)

        try:
            local_result = await self.local.update_item(item, token)
        except CatalogueError as exc:
            return self._local_failure("update", item_id, exc, OperationState.SNAPSHOT_TAKEN)
        self._enter("update", item_id, OperationState.LOCAL_WRITTEN)
        logger.info("item updated in local cat %s", local_result.results)

        try:
            central_result = await self._central("update", item_id, lambda: self.central.update_item(item, token))
        except CatalogueError as exc:
            return await self._compensate_or_report(
                DivergenceDetected("update", item_id, exc),
                lambda: self._revert_local_update(previous, token),
            )

        self._enter("update", item_id, OperationState.CENTRAL_WRITTEN)
        return OrchestratorOutcome(
            status_code=200,
            body=central_result.results,
            kind=OutcomeKind.SUCCESS,
            state=OperationState.CENTRAL_WRITTEN,
        )

    async def delete_item(self, item_id: str, token: str) -> OrchestratorOutcome:
        """PRESENT -> LOCAL_DELETED -> CENTRAL_DELETED, or RESTORING -> RESTORED | UNRECOVERABLE."""
        item_ref = {"id": item_id}
        self._enter("delete", item_id, OperationState.PRESENT)
        try:
            local_result = await self.local.delete_item(item_ref, token)
        except CatalogueError as exc:
            return self._local_failure("delete", item_id, exc, OperationState.PRESENT)
        self._enter("delete", item_id, OperationState.LOCAL_DELETED)
        logger.info("item deleted in local cat %s", local_result.results)

        try:
            central_result = await self._central("delete", item_id, lambda: self.central.delete_item(item_ref, token))
        except CatalogueError as exc:
            return await self._compensate_or_report(
                DivergenceDetected("delete", item_id, exc),
                lambda: self._restore_local_item(item_id, token),
            )

        self._enter("delete", item_id, OperationState.CENTRAL_DELETED)
        return OrchestratorOutcome(
            status_code=200,
            body=central_result.results,
            kind=OutcomeKind.SUCCESS,
            state=OperationState.CENTRAL_DELETED,
        )

    async def get_item(self, item_id: str) -> OrchestratorOutcome:
        """Read from LOCAL only; always terminal, success or not."""
        try:
            result = await self.local.get_item(item_id)
        except CatalogueError as exc:
            logger.info("Get of item '%s' from local cat failed: %s", item_id, exc)
            return OrchestratorOutcome(
                status_code=exc.status_code or 500,
                body=exc.body,
                kind=OutcomeKind.READ_FAILURE,
                state=OperationState.READ,
            )
        return OrchestratorOutcome(
            status_code=200,
            body=result.results,
            kind=OutcomeKind.SUCCESS,
            state=OperationState.READ,
        )

    async def _compensate_or_report(
        self,
        divergence: DivergenceDetected,
        compensation: Compensation,
    ) -> OrchestratorOutcome:
        """Close the divergence window, or record it as unrecoverable."""
        logger.warning("%s", divergence)
        self._enter(divergence.operation, divergence.item_id, OperationState.DIVERGED)

        try:
            outcome = await compensation()
        except CatalogueError as exc:
            outcome = _unrecoverable(exc.status_code or 500, exc.body, step="compensation", error=exc)

        self._enter(divergence.operation, divergence.item_id, outcome.state)
        if outcome.kind is OutcomeKind.UNRECOVERABLE:
            self.divergence_recorder.record(
                operation=divergence.operation,
                item_id=divergence.item_id,
                catalogue_state=DIVERGED_CATALOGUE_STATE[divergence.operation],
                status_code=outcome.status_code,
                detail={
                    "cause": str(divergence.cause),
                    "cause_status": divergence.cause.status_code,
                    **outcome.detail,
                },
            )
        return outcome

    async def _resolve_central_conflict(
        self,
        item_id: str,
        token: str,
        conflict: CatalogueConflict,
    ) -> OrchestratorOutcome:
        """A CENTRAL conflict can mean an earlier attempt landed but its response was lost."""
        try:
            central_result = await self.central.get_item(item_id)
        except CatalogueNotFound:
            central_item = None
        except CatalogueError as exc:
            # CENTRAL may hold the item; deleting LOCAL now could strand it there.
            lookup_failed = _unrecoverable(
                500,
                ErrorResponse.for_status(500, CREATE_RETRY_MESSAGE).model_dump(),
                step="central_get",
                error=exc,
            )

            async def report() -> OrchestratorOutcome:
                return lookup_failed

            return await self._compensate_or_report(DivergenceDetected("create", item_id, conflict), report)
        else:
            central_item = central_result.first_item() if central_result.status_code == 200 else None

        if central_item is None:
            return await self._compensate_or_report(
                DivergenceDetected("create", item_id, conflict),
                lambda: self._remove_local_copy(item_id, token),
            )

        logger.info("item '%s' already present in central cat; earlier create landed", item_id)
        self._enter("create", item_id, OperationState.CENTRAL_WRITTEN)
        return OrchestratorOutcome(
            status_code=201,
            body=central_item,
            kind=OutcomeKind.SUCCESS,
            state=OperationState.CENTRAL_WRITTEN,
        )

    async def _remove_local_copy(self, item_id: str | None, token: str) -> OrchestratorOutcome:
        body = ErrorResponse.for_status(500, CREATE_RETRY_MESSAGE).model_dump()
        if item_id is None:
            return _unrecoverable(500, body, step="local_delete", error="LOCAL result carried no id")
        try:
            await self.local.delete_item({"id": item_id}, token)
        except CatalogueError as exc:
            return _unrecoverable(500, body, step="local_delete", error=exc)
        logger.info("item '%s' removed from local cat after central create failed", item_id)
        return OrchestratorOutcome(
            status_code=500,
            body=body,
            kind=OutcomeKind.COMPENSATED,
            state=OperationState.RESTORED,
        )

    async def _revert_local_update(self, previous: Item, token: str) -> OrchestratorOutcome:
        body = ErrorResponse.for_status(500, UPDATE_RETRY_MESSAGE).model_dump()
        try:
            await self.local.update_item(strip_backend_fields(previous), token)
        except CatalogueError as exc:
            return _unrecoverable(500, body, step="local_revert", error=exc)
        logger.info("item '%s' reverted in local cat after central update failed", previous.get("id"))
        return OrchestratorOutcome(
            status_code=500,
            body=body,
            kind=OutcomeKind.COMPENSATED,
            state=OperationState.RESTORED,
        )

    async def _restore_local_item(self, item_id: str, token: str) -> OrchestratorOutcome:
        logger.warning("Item '%s' not deleted from central cat", item_id)
        self._enter("delete", item_id, OperationState.RESTORING)
        try:
            central_result = await self.central.get_item(item_id)
        except CatalogueError as exc:
            return _unrecoverable(exc.status_code or 500, exc.body, step="central_get", error=exc)

        central_item = central_result.first_item()
        if central_result.status_code != 200 or central_item is None:
            logger.info("item '%s' not present in central", item_id)
            return _unrecoverable(
                central_result.status_code if central_result.status_code != 200 else 404,
                central_result.results,
                step="central_get",
                error="item not present in central",
            )

        logger.info("getting item '%s' from central cat to restore in local cat", item_id)
        try:
            recreated = await self.local.create_item(strip_backend_fields(central_item), token)
        except CatalogueError as exc:
            return _unrecoverable(exc.status_code or 500, exc.body, step="local_create", error=exc)
        if recreated.status_code != 201:
            return _unrecoverable(recreated.status_code, recreated.results, step="local_create", error="unexpected status")

        logger.info("item '%s' created again in local cat", item_id)
        return OrchestratorOutcome(
            status_code=201,
            body=recreated.results,
            kind=OutcomeKind.COMPENSATED,
            state=OperationState.RESTORED,
        )

    async def _central(
        self,
        operation: str,
        item_id: str | None,
        call: Callable[[], Awaitable[OperationResult]],
    ) -> OperationResult:
        return await self.retry_policy.run(call, description=f"CENTRAL {operation} of item '{item_id}'")

    def _local_failure(
        self,
        operation: str,
        item_id: Any,
        exc: CatalogueError,
        state: OperationState,
    ) -> OrchestratorOutcome:
        logger.info("Local %s of item '%s' failed: %s", operation, item_id, exc)
        return OrchestratorOutcome(
            status_code=exc.status_code or 500,
            body=exc.body,
            kind=OutcomeKind.LOCAL_WRITE_FAILURE,
            state=state,
        )

    @staticmethod
    def _enter(operation: str, item_id: Any, state: OperationState) -> None:
        logger.debug("%s item '%s' -> %s", operation, item_id, state.value)


def _item_id(item: Item) -> str | None:
    item_id = item.get("id")
    return str(item_id) if item_id is not None else None


def _unrecoverable(status_code: int, body: Any, *, step: str, error: Any) -> OrchestratorOutcome:
    return OrchestratorOutcome(
        status_code=status_code,
        body=body,
        kind=OutcomeKind.UNRECOVERABLE,
        state=OperationState.UNRECOVERABLE,
        detail={"failed_step": step, "compensation_error": str(error)},
    )
