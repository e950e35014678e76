"""Store contract shared by the REST and SQL store implementations.

Every store call resolves to a StoreResult. Failures are returned as a
StoreError carrying a human-readable message; store calls never raise.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")

Row = dict[str, Any]

PRODUCT_TABLE = "stock_items"
HISTORY_TABLE = "stock_history"


@dataclass(frozen=True)
class StoreError:
    """Structured error returned by the store."""

    message: str
    code: str | None = None
    details: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Either a result set or an error, never both."""

    data: T | None = None
    error: StoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str, code: str | None = None, details: str | None = None) -> "StoreResult[T]":
        return cls(error=StoreError(message=message, code=code, details=details))


class Store(ABC):
    """Abstract store holding the product and history tables."""

    @abstractmethod
    async def select_products(self) -> StoreResult[list[Row]]:
        """Return every product row (id, name, category, quantity, price)."""

    @abstractmethod
    async def insert_product(self, row: Row) -> StoreResult[None]:
        """Insert a product row whose id was generated by the caller."""

    @abstractmethod
    async def update_product(self, product_id: str, fields: Row) -> StoreResult[None]:
        """Update the product with the given id."""

    @abstractmethod
    async def delete_product(self, product_id: str) -> StoreResult[None]:
        """Delete the product with the given id."""

    @abstractmethod
    async def insert_history(self, item_id: str, action: str) -> StoreResult[None]:
        """Append a history entry; the store assigns id and timestamp."""

    @abstractmethod
    async def delete_history(self, item_id: str) -> StoreResult[None]:
        """Delete every history entry referencing item_id."""

    @abstractmethod
    async def select_history(self) -> StoreResult[list[Row]]:
        """Return history rows, newest first.

        Each row has id, action, created_at, item_id and a `stock_items`
        object holding the joined product name and quantity (or None).
        """

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the store is reachable."""

    async def close(self) -> None:
        """Release connections held by the store."""
