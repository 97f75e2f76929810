"""Shared service instances for the item API."""

from functools import lru_cache

from app.core.settings import settings
from app.interfaces.catalogue_client import CatalogueClient
from app.providers.catalogue.http_catalogue import HttpCatalogueClient
from app.providers.catalogue.memory_catalogue import InMemoryCatalogueClient
from app.schemas.catalogue import CatalogueType
from app.services.catalogue_orchestrator import CatalogueOrchestrator
from app.services.deadline import DeadlineRunner
from app.services.divergence_recorder import (
    DivergenceRecorder,
    DivergenceRecorderProtocol,
    InMemoryDivergenceRecorder,
)
from app.services.retry import RetryPolicy


def build_catalogue_client(catalogue_type: CatalogueType) -> CatalogueClient:
    """Select the configured catalogue backend for one catalogue type."""
    if settings.catalogue_backend == "memory":
        return InMemoryCatalogueClient(catalogue_type)

    base_url = (
        settings.local_catalogue_url if catalogue_type is CatalogueType.LOCAL else settings.central_catalogue_url
    )
    return HttpCatalogueClient(catalogue_type, base_url, timeout=settings.catalogue_timeout_seconds)


def build_divergence_recorder() -> DivergenceRecorderProtocol:
    if not settings.database_url:
        return InMemoryDivergenceRecorder()

    from app.db.session import get_session_factory

    return DivergenceRecorder(session_factory=get_session_factory())


@lru_cache(maxsize=1)
def get_orchestrator() -> CatalogueOrchestrator:
    return CatalogueOrchestrator(
        local=build_catalogue_client(CatalogueType.LOCAL),
        central=build_catalogue_client(CatalogueType.CENTRAL),
        retry_policy=RetryPolicy(
            attempts=settings.central_retry_attempts,
            base_delay=settings.central_retry_base_delay_seconds,
            max_delay=settings.central_retry_max_delay_seconds,
        ),
        divergence_recorder=build_divergence_recorder(),
    )


@lru_cache(maxsize=1)
def get_deadline_runner() -> DeadlineRunner:
    return DeadlineRunner(timeout=settings.request_timeout_seconds)
