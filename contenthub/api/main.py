import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from contenthub.adapters.sqlite.migrator import SQLiteMigrator
from contenthub.api.deps import get_settings
from contenthub.domain.errors import (
    ContentHubError,
    InvalidTransitionError,
    MissingReason,
    PersistenceFailed,
    Unauthorized,
    UploadFailed,
    ValidationFailed,
    VersionConflict,
)
from contenthub.rules.loader import load_rules_or_default

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Fail fast on a broken rules file or schema
    try:
        load_rules_or_default(settings.rules_path)
        logger.info("Rules loaded from %s", settings.rules_path)
    except ValueError:
        logger.critical("Rules load failed for %s", settings.rules_path)
        raise

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(settings.db_path).run_migrations()

    yield


def status_for(exc: ContentHubError) -> int:
    if isinstance(exc, Unauthorized):
        return 401 if not exc.authenticated else 403
    if isinstance(exc, (ValidationFailed, MissingReason, UploadFailed)):
        return 400
    if isinstance(exc, InvalidTransitionError):
        return 409
    if isinstance(exc, PersistenceFailed):
        return exc.status_code or 500
    return 500


def error_body(exc: ContentHubError) -> dict[str, Any]:
    body: dict[str, Any] = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, ValidationFailed):
        body["errors"] = [
            {"code": e.code, "message": e.message, "field": e.field} for e in exc.errors
        ]
    elif isinstance(exc, InvalidTransitionError):
        body.update(fromStatus=exc.from_status, toStatus=exc.to_status, reason=exc.reason)
    elif isinstance(exc, VersionConflict):
        body.update(expected=exc.expected, actual=exc.actual)
    return body


async def content_hub_error_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, ContentHubError):
        raise exc
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = None
    if isinstance(exc, Unauthorized) and not exc.authenticated:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=status_code, content=error_body(exc), headers=headers)


app = FastAPI(
    title="Content Hub API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_exception_handler(ContentHubError, content_hub_error_handler)

# --- Routers ---
from contenthub.api.routes import content, edge_hubs, upload  # noqa: E402

app.include_router(content.router, prefix="/content", tags=["Content"])
app.include_router(edge_hubs.router, prefix="/edge-hubs", tags=["Edge Hubs"])
app.include_router(upload.router, prefix="", tags=["Uploads"])


# CORS (Allow the admin frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "contenthub"}
