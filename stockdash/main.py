"""FastAPI application entry point.

Inventory dashboard backend: exposes the inventory manager to the
presentation layer.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stockdash import __version__
from stockdash.api.routes import (
    categories_router,
    dashboard_router,
    health_router,
    history_router,
    products_router,
)
from stockdash.config import settings
from stockdash.core import get_inventory_manager, reset_inventory_manager
from stockdash.infra.logging import get_logger, setup_logging
from stockdash.schemas.common import ErrorResponse
from stockdash.services import close_store

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Startup:
    - Build the inventory manager and run the initial product fetch

    Shutdown:
    - Close the manager so late store results are discarded
    - Close store connections
    """
    logger.info(
        "StockDash starting",
        environment=settings.environment,
        store_backend=settings.store_backend,
    )

    manager = get_inventory_manager()
    if not await manager.fetch_products():
        logger.warning("Initial product fetch failed - use /products/refresh to retry")

    yield

    logger.info("StockDash shutting down")
    reset_inventory_manager()
    await close_store()
    logger.info("Cleanup complete")


app = FastAPI(
    title="StockDash",
    description="Inventory dashboard backend",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "dev" else None,
    redoc_url=None,
)

# CORS middleware (the dashboard front end runs on its own origin in dev)
if settings.environment == "dev":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Bind method and path to every log line of a mutating request."""
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return await call_next(request)

    with structlog.contextvars.bound_contextvars(
        method=request.method,
        path=request.url.path,
    ):
        response = await call_next(request)
        logger.info("Request handled", status_code=response.status_code)
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with a structured 500 response."""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            error_type=type(exc).__name__,
        ).model_dump(),
    )


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router, tags=["Health"])
app.include_router(products_router, prefix="/products", tags=["Products"])
app.include_router(categories_router, prefix="/categories", tags=["Categories"])
app.include_router(history_router, prefix="/history", tags=["History"])
app.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])


@app.get("/")
async def root() -> dict:
    """Root endpoint - basic service info."""
    return {
        "service": "StockDash",
        "version": __version__,
        "environment": settings.environment,
    }
