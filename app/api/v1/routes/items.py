"""Item endpoints writing to both the LOCAL and CENTRAL catalogues."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Header, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.api.v1.dependencies import get_deadline_runner, get_orchestrator
from app.schemas.errors import ErrorResponse
from app.schemas.outcome import OrchestratorOutcome
from app.services.catalogue_orchestrator import CatalogueOrchestrator
from app.services.deadline import DeadlineRunner, RequestDeadlineExceeded

router = APIRouter()


@router.post("/item")
async def create_item(
    item: dict[str, Any] = Body(...),
    token: str = Header(...),
    orchestrator: CatalogueOrchestrator = Depends(get_orchestrator),
    deadline: DeadlineRunner = Depends(get_deadline_runner),
) -> JSONResponse:
    """Create an item in LOCAL, then in CENTRAL with the LOCAL-assigned id."""
    return await _respond(deadline, orchestrator.create_item(item, token), description="create item")


@router.patch("/item")
async def update_item(
    item: dict[str, Any] = Body(...),
    token: str = Header(...),
    orchestrator: CatalogueOrchestrator = Depends(get_orchestrator),
    deadline: DeadlineRunner = Depends(get_deadline_runner),
) -> JSONResponse:
    """Update an item in LOCAL, then in CENTRAL."""
    return await _respond(
        deadline,
        orchestrator.update_item(item, token),
        description=f"update item '{item.get('id')}'",
    )


@router.delete("/item")
async def delete_item(
    item_id: str = Query(..., alias="id"),
    token: str = Header(...),
    orchestrator: CatalogueOrchestrator = Depends(get_orchestrator),
    deadline: DeadlineRunner = Depends(get_deadline_runner),
) -> JSONResponse:
    """Delete an item from LOCAL, then from CENTRAL."""
    return await _respond(deadline, orchestrator.delete_item(item_id, token), description=f"delete item '{item_id}'")


@router.get("/item")
async def get_item(
    item_id: str = Query(..., alias="id"),
    orchestrator: CatalogueOrchestrator = Depends(get_orchestrator),
    deadline: DeadlineRunner = Depends(get_deadline_runner),
) -> JSONResponse:
    """Read an item from the LOCAL catalogue."""
    return await _respond(deadline, orchestrator.get_item(item_id), description=f"get item '{item_id}'")


async def _respond(deadline: DeadlineRunner, operation: Any, *, description: str) -> JSONResponse:
    try:
        outcome: OrchestratorOutcome = await deadline.run(operation, description=description)
    except RequestDeadlineExceeded as exc:
        return JSONResponse(status_code=408, content=ErrorResponse.for_status(408, str(exc)).model_dump())
    return JSONResponse(status_code=outcome.status_code, content=jsonable_encoder(outcome.body))
