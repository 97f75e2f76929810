"""Database engine and session factory."""

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.settings import settings


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Build the engine on first use so the API can start without a database."""
    if not settings.database_url:
        raise RuntimeError("DATABASE_URL is not set. Configure it in the environment or .env file.")
    return create_engine(settings.database_url, pool_pre_ping=True)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(
        bind=get_engine(),
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it after use."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
