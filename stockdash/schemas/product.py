"""Product, history and dashboard schemas."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field


class NewProduct(BaseModel):
    """Candidate product for creation (no id yet).

    Only the shape is checked here. Business rules (non-empty name,
    non-negative stock and price) are enforced by the inventory manager
    so invalid input is rejected in one place, before any store call.
    """

    name: str
    category: str | None = None
    stock: int = 0
    price: float = 0


class Product(NewProduct):
    """Inventory product as held by the inventory manager."""

    model_config = ConfigDict(frozen=True)

    id: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Product":
        """Build a Product from a store row (`quantity` becomes `stock`)."""
        return cls(
            id=str(row["id"]),
            name=row["name"],
            category=row.get("category"),
            stock=row.get("quantity") or 0,
            price=row.get("price") or 0,
        )

    def to_row(self) -> dict[str, Any]:
        """Store row for this product (`stock` becomes `quantity`)."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "quantity": self.stock,
            "price": self.price,
        }


class ProductUpdate(NewProduct):
    """Request body for a full product update; the id comes from the path."""


class HistoryAction(str, Enum):
    """Action recorded in a history entry."""

    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"
    ADJUSTED = "adjusted"


class HistoryEntry(BaseModel):
    """Append-only history entry joined with its product for display."""

    model_config = ConfigDict(frozen=True)

    id: str
    item_id: str
    action: HistoryAction
    created_at: datetime | None = None
    product_name: str | None = None
    quantity: int | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "HistoryEntry":
        """Build an entry from a history row with an embedded `stock_items` object."""
        item = row.get("stock_items") or {}
        return cls(
            id=str(row["id"]),
            item_id=str(row["item_id"]),
            action=row["action"],
            created_at=row.get("created_at"),
            product_name=item.get("name"),
            quantity=item.get("quantity"),
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def quantity_label(self) -> str:
        """Signed quantity as shown in the history table ("-" for deletions)."""
        if self.action == HistoryAction.DELETED or self.quantity is None:
            return "-"
        if self.quantity > 0:
            return f"+{self.quantity}"
        return str(self.quantity)


class ProductListResponse(BaseModel):
    """Product list with the manager's loading flag."""

    products: list[Product]
    is_loading: bool


class CategoryIn(BaseModel):
    """Request body for declaring a category."""

    name: str


class DashboardStats(BaseModel):
    """Aggregates shown on the dashboard cards."""

    total_products: int = Field(description="Number of products")
    total_value: float = Field(description="Sum of price * stock")
    low_stock_count: int = Field(description="Products with stock at or below the threshold")
    recent_orders: int = Field(default=0, description="Placeholder, no order data source yet")
