"""Inventory state manager.

Owns the in-memory product and category lists and mediates every change
between the presentation layer and the store. Local state only changes
after the corresponding store call succeeded. Operations report failures
through notifications and a boolean result instead of raising.

Store-touching operations run under a single asyncio lock, so concurrent
calls (a double-clicked "Add" button, a refresh racing an update) are
serialized and a fetch can never overwrite state written by a later
mutation. Once `close()` has been called, store responses that arrive
afterwards are discarded.
"""

import asyncio
import math
import uuid

from pydantic import ValidationError

from stockdash.core.categories import count_products_in_category, derive_categories
from stockdash.core.export import render_products_csv
from stockdash.core.filters import filter_products
from stockdash.core.notifications import Notifier
from stockdash.core.statistics import compute_dashboard_stats
from stockdash.infra.logging import get_logger, logged_operation
from stockdash.schemas.common import Notification
from stockdash.schemas.product import (
    DashboardStats,
    HistoryAction,
    HistoryEntry,
    NewProduct,
    Product,
)
from stockdash.services.store import Store

logger = get_logger(__name__)


def validate_product(candidate: NewProduct) -> list[str]:
    """Business validation for a product candidate.

    Returns:
        List of problems, empty when the candidate is valid
    """
    problems: list[str] = []
    if not candidate.name or not candidate.name.strip():
        problems.append("Product name is required.")
    if candidate.stock < 0:
        problems.append("Stock cannot be negative.")
    if not math.isfinite(candidate.price):
        problems.append("Price must be a number.")
    elif candidate.price < 0:
        problems.append("Price cannot be negative.")
    return problems


class InventoryManager:
    """Owned state for products and categories backed by a Store."""

    def __init__(self, store: Store, notifier: Notifier | None = None) -> None:
        """Initialize the manager with empty state.

        Args:
            store: Store holding the product and history tables
            notifier: Notification sink (a fresh one is created if omitted)
        """
        self._store = store
        self._notifier = notifier or Notifier()
        self._products: list[Product] = []
        self._categories: list[str] = []
        self._declared: list[str] = []
        self._is_loading = True
        self._closed = False
        self._lock = asyncio.Lock()
        self._stats_cache: tuple[list[Product], DashboardStats] | None = None

    @property
    def products(self) -> list[Product]:
        return list(self._products)

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    def drain_notifications(self) -> list[Notification]:
        return self._notifier.drain()

    def close(self) -> None:
        """Stop applying store results to local state."""
        self._closed = True
        logger.info("Inventory manager closed")

    def _discarded(self) -> bool:
        if self._closed:
            logger.info("Discarding store result after close")
            return True
        return False

    # =========================================================================
    # Products
    # =========================================================================

    @logged_operation("fetch_products")
    async def fetch_products(self) -> bool:
        """Reload products from the store and rebuild the category list.

        Prior state is left untouched on failure. The loading flag is
        cleared whatever the outcome.
        """
        async with self._lock:
            try:
                result = await self._store.select_products()
                if self._discarded():
                    return False

                if not result.ok:
                    self._notifier.failure("Failed to load products", result.error.message)
                    return False

                try:
                    products = [Product.from_row(row) for row in result.data or []]
                except (KeyError, TypeError, ValidationError) as e:
                    logger.error("Malformed product rows", error=str(e))
                    self._notifier.failure(
                        "An unexpected error occurred",
                        "Could not load products. Please try again later.",
                    )
                    return False

                self._products = products
                self._categories = derive_categories(products, self._declared)
                logger.info(
                    "Products loaded",
                    count=len(products),
                    categories=len(self._categories),
                )
                return True
            finally:
                if not self._closed:
                    self._is_loading = False

    @logged_operation("add_product")
    async def create_product(self, candidate: NewProduct) -> Product | None:
        """Validate, insert and record a new product.

        Returns:
            The created product, or None on failure
        """
        problems = validate_product(candidate)
        if problems:
            self._notifier.failure("Failed to add product", " ".join(problems))
            return None

        async with self._lock:
            product = Product(
                id=str(uuid.uuid4()),
                name=candidate.name,
                category=candidate.category,
                stock=candidate.stock,
                price=candidate.price,
            )
            result = await self._store.insert_product(product.to_row())
            if not result.ok:
                if not self._discarded():
                    self._notifier.failure("Failed to add product", result.error.message)
                return None

            await self._record_history(product.id, HistoryAction.ADDED)
            if self._discarded():
                return None

            self._products = [*self._products, product]
            self._remember_category(product.category)
            logger.info("Product added", product_id=product.id, name=product.name)
            self._notifier.success("Product added", "The new product has been added to inventory.")
            return product

    async def add_product(self, candidate: NewProduct) -> bool:
        return await self.create_product(candidate) is not None

    def get_product(self, product_id: str) -> Product | None:
        for product in self._products:
            if product.id == product_id:
                return product
        return None

    @logged_operation("update_product")
    async def update_product(self, product: Product) -> bool:
        """Write a full product record to the store and replace it locally."""
        problems = validate_product(product)
        if problems:
            self._notifier.failure("Failed to update product", " ".join(problems))
            return False

        async with self._lock:
            # Checked under the lock so a queued delete of the same product wins.
            if self.get_product(product.id) is None:
                self._notifier.failure("Failed to update product", "Product not found.")
                return False

            row = product.to_row()
            row.pop("id")
            result = await self._store.update_product(product.id, row)
            if not result.ok:
                if not self._discarded():
                    self._notifier.failure("Failed to update product", result.error.message)
                return False

            await self._record_history(product.id, HistoryAction.UPDATED)
            if self._discarded():
                return False

            self._products = [product if p.id == product.id else p for p in self._products]
            self._remember_category(product.category)
            logger.info("Product updated", product_id=product.id)
            self._notifier.success("Product updated", "The product details have been updated.")
            return True

    @logged_operation("delete_product")
    async def delete_product(self, product_id: str) -> bool:
        """Delete a product's history, then the product itself.

        A failed history deletion aborts before the product is touched.
        """
        async with self._lock:
            history = await self._store.delete_history(product_id)
            if not history.ok:
                if not self._discarded():
                    self._notifier.failure(
                        "Failed to delete product",
                        f"Could not remove the product's history: {history.error.message}",
                    )
                return False

            result = await self._store.delete_product(product_id)
            if not result.ok:
                logger.error(
                    "Product delete failed after its history was removed",
                    product_id=product_id,
                    error=result.error.message,
                )
                if not self._discarded():
                    self._notifier.failure(
                        "Failed to delete product",
                        f"History was removed but the product could not be deleted: {result.error.message}",
                    )
                return False

            if self._discarded():
                return False

            self._products = [p for p in self._products if p.id != product_id]
            logger.info("Product deleted", product_id=product_id)
            self._notifier.success("Product deleted", "The product and its history have been removed.")
            return True

    async def _record_history(self, item_id: str, action: HistoryAction) -> bool:
        # Best effort: a failed history write never rolls back the product write.
        result = await self._store.insert_history(item_id, action.value)
        if not result.ok:
            logger.warning(
                "History entry not recorded",
                product_id=item_id,
                action=action.value,
                error=result.error.message,
            )
        return result.ok

    def filter_products(self, search: str | None = None, category: str | None = None) -> list[Product]:
        return filter_products(self._products, search=search, category=category)

    # =========================================================================
    # Categories
    # =========================================================================

    def _remember_category(self, category: str | None) -> None:
        if category and category not in self._categories:
            self._categories = [*self._categories, category]

    def add_category(self, name: str) -> bool:
        """Declare a category before any product uses it."""
        name = (name or "").strip()
        if not name:
            self._notifier.failure("Invalid category", "Category name cannot be empty.")
            return False
        if name in self._categories:
            self._notifier.failure("Category exists", "This category already exists in the list.")
            return False

        self._categories = [*self._categories, name]
        if name not in self._declared:
            self._declared = [*self._declared, name]
        self._notifier.success("Category added", f'"{name}" has been added to categories.')
        return True

    def delete_category(self, name: str) -> bool:
        """Remove a category nobody uses; products are never modified."""
        in_use = count_products_in_category(self._products, name)
        if in_use > 0:
            self._notifier.failure(
                "Cannot delete category",
                f"There are {in_use} products using this category. Please reassign them first.",
            )
            return False

        self._categories = [c for c in self._categories if c != name]
        self._declared = [c for c in self._declared if c != name]
        self._notifier.success("Category deleted", f'"{name}" has been removed from categories.')
        return True

    # =========================================================================
    # History, statistics, export
    # =========================================================================

    @logged_operation("list_history")
    async def list_history(self) -> list[HistoryEntry]:
        """History entries joined with their product, newest first."""
        async with self._lock:
            result = await self._store.select_history()
        if not result.ok:
            self._notifier.failure("Failed to load history", result.error.message)
            return []

        entries: list[HistoryEntry] = []
        for row in result.data or []:
            try:
                entries.append(HistoryEntry.from_row(row))
            except (AttributeError, KeyError, TypeError, ValidationError) as e:
                row_id = row.get("id") if isinstance(row, dict) else None
                logger.warning("Skipping malformed history row", row_id=row_id, error=str(e))
        return entries

    def stats(self) -> DashboardStats:
        # The product list is replaced, never mutated, so identity is a safe cache key.
        if self._stats_cache is None or self._stats_cache[0] is not self._products:
            self._stats_cache = (self._products, compute_dashboard_stats(self._products))
        return self._stats_cache[1]

    def export_csv(self) -> str:
        return render_products_csv(self._products)
