"""Records unrecoverable divergences for operator remediation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.divergence import Divergence

logger = logging.getLogger(__name__)


class DivergenceRecorderProtocol(Protocol):
    def record(
        self,
        *,
        operation: str,
        item_id: str | None,
        catalogue_state: str,
        status_code: int | None,
        detail: dict[str, Any],
    ) -> None:
        ...


class DivergenceRecorder(DivergenceRecorderProtocol):
    """Logs every divergence and persists it when a database is configured."""

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self.session_factory = session_factory

    def record(
        self,
        *,
        operation: str,
        item_id: str | None,
        catalogue_state: str,
        status_code: int | None,
        detail: dict[str, Any],
    ) -> None:
        logger.error(
            "Unrecoverable %s divergence for item '%s' (%s, status=%s): %s",
            operation,
            item_id,
            catalogue_state,
            status_code,
            detail,
        )
        if self.session_factory is None:
            return

        db = self.session_factory()
        try:
            db.add(
                Divergence(
                    operation=operation,
                    item_id=item_id,
                    catalogue_state=catalogue_state,
                    status_code=status_code,
                    detail=detail,
                )
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            # The response must still go out; the log line above is the fallback record.
            logger.exception("Failed to persist divergence for item '%s'", item_id)
        finally:
            db.close()


class InMemoryDivergenceRecorder(DivergenceRecorderProtocol):
    """Keeps the most recent divergences in a list; used without a database and in tests."""

    def __init__(self, max_records: int = 1000) -> None:
        self.max_records = max_records
        self.records: list[dict[str, Any]] = []

    def record(
        self,
        *,
        operation: str,
        item_id: str | None,
        catalogue_state: str,
        status_code: int | None,
        detail: dict[str, Any],
    ) -> None:
        logger.error(
            "Unrecoverable %s divergence for item '%s' (%s, status=%s)",
            operation,
            item_id,
            catalogue_state,
            status_code,
        )
        self.records.append(
            {
                "operation": operation,
                "item_id": item_id,
                "catalogue_state": catalogue_state,
                "status_code": status_code,
                "detail": detail,
            }
        )
        del self.records[: -self.max_records]
