"""Main router for API v1."""

from fastapi import APIRouter

from app.api.v1.routes.divergences import router as divergences_router
from app.api.v1.routes.items import router as items_router

api_router = APIRouter()

api_router.include_router(items_router, tags=["item"])
# Unrecoverable divergences awaiting manual remediation.
api_router.include_router(divergences_router, tags=["divergence"])
