"""SQLAlchemy models for the tables owned by the hosted backend."""

from stockdash.models.base import Base, CreatedAtMixin
from stockdash.models.stock_history import StockHistory
from stockdash.models.stock_item import StockItem

__all__ = [
    "Base",
    "CreatedAtMixin",
    "StockHistory",
    "StockItem",
]
