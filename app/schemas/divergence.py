"""Schemas for the divergence listing endpoint."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class DivergenceRead(BaseModel):
    """One recorded divergence as exposed to operators."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    operation: str
    item_id: str | None
    catalogue_state: str
    status_code: int | None
    detail: dict[str, Any]
    resolved: bool
    created_at: datetime | None = None
