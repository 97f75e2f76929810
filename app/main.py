"""FastAPI entrypoint for the Onboarding Server."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.dependencies import get_deadline_runner, get_orchestrator
from app.api.v1.router import api_router
from app.core.settings import settings
from app.schemas.errors import ErrorResponse

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ALLOWED_HEADERS = ["Accept", "Content-Type", "Content-Length", "Origin", "Authorization", "token"]
ALLOWED_METHODS = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
COMMON_RESPONSE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
    "X-Content-Type-Options": "nosniff",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("%s %s starting (%s catalogues)", settings.app_name, settings.app_version, settings.catalogue_backend)
    yield
    # Let detached writes finish before the catalogue clients go away.
    await get_deadline_runner().drain()
    orchestrator = get_orchestrator()
    await orchestrator.local.aclose()
    await orchestrator.central.aclose()


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_headers=ALLOWED_HEADERS,
    allow_methods=ALLOWED_METHODS,
)


@app.middleware("http")
async def add_common_headers(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    response = await call_next(request)
    for header, value in COMMON_RESPONSE_HEADERS.items():
        response.headers[header] = value
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse.for_status(exc.status_code, detail).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    missing = ", ".join(".".join(str(part) for part in error["loc"]) for error in exc.errors())
    return JSONResponse(
        status_code=400,
        content=ErrorResponse.for_status(400, f"Invalid request: {missing}").model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=ErrorResponse.for_status(500).model_dump())


@app.get("/")
async def health_check() -> dict[str, str]:
    """Simple health endpoint to validate service status."""
    return {"status": "ok", "message": "Onboarding Server is running"}


# Mount API v1 routes under /api/v1.
app.include_router(api_router, prefix="/api/v1")
