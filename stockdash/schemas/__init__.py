"""Pydantic schemas for request/response validation."""

from stockdash.schemas.common import ErrorResponse, HealthResponse, Notification, OperationResult
from stockdash.schemas.product import (
    CategoryIn,
    DashboardStats,
    HistoryAction,
    HistoryEntry,
    NewProduct,
    Product,
    ProductListResponse,
    ProductUpdate,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "Notification",
    "OperationResult",
    "CategoryIn",
    "DashboardStats",
    "HistoryAction",
    "HistoryEntry",
    "NewProduct",
    "Product",
    "ProductListResponse",
    "ProductUpdate",
]
