"""Operator view of divergences the orchestrator could not repair."""

from collections.abc import Generator

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.settings import settings
from app.db.session import get_db
from app.models.divergence import Divergence
from app.schemas.divergence import DivergenceRead

router = APIRouter()


def get_divergence_db() -> Generator[Session, None, None]:
    """Yield a session, or 503 when divergences are only logged."""
    if not settings.database_url:
        raise HTTPException(status_code=503, detail="Divergence store is not configured")
    yield from get_db()


@router.get("/divergences", response_model=list[DivergenceRead])
def list_divergences(
    resolved: bool = Query(False),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_divergence_db),
) -> list[Divergence]:
    """List recorded divergences, newest first."""
    query = (
        select(Divergence)
        .where(Divergence.resolved.is_(resolved))
        .order_by(Divergence.created_at.desc())
        .limit(limit)
    )
    return list(db.execute(query).scalars().all())
