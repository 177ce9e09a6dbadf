"""
FastAPI application for keepsake.
"""

from fastapi import FastAPI, HTTPException, Depends
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .content import router as content_router
from .schemas import ErrorResponse, HealthResponse, ReconcileResponse
from .services import get_embedding_client, get_store
from ..core import config
from ..core.db import health_check
from ..core.errors import (
    ContentNotFound,
    EmbeddingUnavailable,
    GenerationUnavailable,
    InvalidQuery,
    KeepsakeError,
)
from ..core.reconcile import reconcile_all
from ..util.logging import logger

ERROR_STATUS = {
    EmbeddingUnavailable: 503,
    GenerationUnavailable: 503,
    InvalidQuery: 400,
    ContentNotFound: 404,
}

# Initialize the FastAPI application
app = FastAPI(
    title="Keepsake API",
    version=config.VERSION,
    description="Save browser content and find it again by keyword, meaning or question",
    docs_url="/docs" if config.debug_enabled() else None,
    redoc_url="/redoc" if config.debug_enabled() else None
)

# Allow the dashboard and the browser extension
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(content_router, prefix="/api/content", tags=["content"])


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(store=Depends(get_store)):
    """Check system health."""
    db_health = health_check(store.db_path)
    item_count = store.count() if db_health else 0

    return HealthResponse(
        status="healthy" if db_health else "unhealthy",
        version=config.VERSION,
        db_health=db_health,
        item_count=item_count,
        embedding_model=config.EMBED_MODEL_NAME
    )


@app.post("/admin/reconcile", response_model=ReconcileResponse)
def reconcile_endpoint(store=Depends(get_store), embedding_client=Depends(get_embedding_client)):
    """Re-embed every item whose embedding is missing or stale."""
    if not config.debug_enabled():
        raise HTTPException(status_code=403, detail="Admin endpoints require debug mode")

    report = reconcile_all(store, embedding_client)
    return ReconcileResponse(
        scanned=report.scanned,
        embedded=report.embedded,
        unchanged=report.unchanged,
        failed=report.failed,
        errors=report.errors
    )


@app.exception_handler(KeepsakeError)
async def keepsake_exception_handler(request, exc: KeepsakeError):
    """Map pipeline failures to structured error responses."""
    status_code = ERROR_STATUS.get(type(exc), 500)
    if status_code >= 500:
        logger.error(f"{exc.error_type} on {request.url.path}: {exc}")
    error = ErrorResponse(error_type=exc.error_type, message=str(exc))
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Handle all unhandled exceptions."""
    logger.error(f"Unhandled exception: {exc}")
    content = {"detail": "Internal server error"}
    if config.debug_enabled():
        content["debug"] = str(exc)
    status_code = 500
    return JSONResponse(
        status_code=status_code,
        content=content,
    )
