"""Divergence model."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import JSON, Boolean, Index, Integer, String, TIMESTAMP, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Divergence(Base):
    """Unresolved LOCAL/CENTRAL inconsistency awaiting manual remediation."""

    __tablename__ = "divergences"
    __table_args__ = (
        Index("ix_divergences_item_id", "item_id"),
        Index("ix_divergences_resolved", "resolved"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    operation: Mapped[str] = mapped_column(String(16), nullable=False)
    item_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Where the item is left, e.g. "present_in_local_only".
    catalogue_state: Mapped[str] = mapped_column(String(64), nullable=False)
    status_code: Mapped[int | None] = mapped_column(Integer, nullable=True)
    detail: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[Any] = mapped_column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
