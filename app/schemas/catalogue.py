"""Schemas shared by catalogue clients and the orchestrator."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Item = dict[str, Any]

# Set by a catalogue on write; not accepted back as create/update input.
BACKEND_ASSIGNED_FIELDS = ("itemStatus", "resourceServerHTTPAccessURL")


class CatalogueType(str, Enum):
    """Selects which backend a catalogue call targets."""

    LOCAL = "LOCAL"
    CENTRAL = "CENTRAL"


class OperationResult(BaseModel):
    """Normalized outcome of a single catalogue call."""

    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(..., alias="statusCode")
    results: Item | list[Item] = Field(default_factory=list)

    def first_item(self) -> Item | None:
        """Return the single item carried by the result, if any."""
        if isinstance(self.results, list):
            return self.results[0] if self.results else None
        return self.results or None


def strip_backend_fields(item: Item) -> Item:
    """Copy of ``item`` without fields a catalogue assigns on its own."""
    return {key: value for key, value in item.items() if key not in BACKEND_ASSIGNED_FIELDS}
