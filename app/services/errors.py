"""Catalogue and orchestration error classes."""

from __future__ import annotations

from typing import Any

from app.schemas.catalogue import CatalogueType


class CatalogueError(Exception):
    """Raised when a catalogue call fails, whatever the reason."""

    def __init__(
        self,
        message: str,
        *,
        catalogue_type: CatalogueType,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.catalogue_type = catalogue_type
        self.status_code = status_code
        self.body = body if body is not None else {"detail": message}

    @property
    def transient(self) -> bool:
        """Whether repeating the same call could succeed."""
        return self.status_code is None or self.status_code == 429 or self.status_code >= 500


class CatalogueNotFound(CatalogueError):
    """Raised when the catalogue reports the item absent."""

    def __init__(self, message: str, *, catalogue_type: CatalogueType, body: Any = None) -> None:
        super().__init__(message, catalogue_type=catalogue_type, status_code=404, body=body)


class CatalogueConflict(CatalogueError):
    """Raised when the catalogue already holds a matching item."""

    def __init__(self, message: str, *, catalogue_type: CatalogueType, body: Any = None) -> None:
        super().__init__(message, catalogue_type=catalogue_type, status_code=409, body=body)


class CatalogueUnavailable(CatalogueError):
    """Raised when the catalogue could not be reached at all."""

    def __init__(self, message: str, *, catalogue_type: CatalogueType) -> None:
        super().__init__(message, catalogue_type=catalogue_type, status_code=None)


class DivergenceDetected(Exception):
    """LOCAL was written but CENTRAL was not."""

    def __init__(self, operation: str, item_id: str | None, cause: CatalogueError) -> None:
        super().__init__(f"{operation} diverged for item '{item_id}': {cause}")
        self.operation = operation
        self.item_id = item_id
        self.cause = cause
