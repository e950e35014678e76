"""API routes module."""

from stockdash.api.routes.categories import router as categories_router
from stockdash.api.routes.dashboard import router as dashboard_router
from stockdash.api.routes.health import router as health_router
from stockdash.api.routes.history import router as history_router
from stockdash.api.routes.products import router as products_router

__all__ = [
    "categories_router",
    "dashboard_router",
    "health_router",
    "history_router",
    "products_router",
]
