"""Shared fixtures: an in-memory store, a manager over it, and an API client."""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from stockdash.core import InventoryManager
from stockdash.services.store import Row, Store, StoreError, StoreResult


class InMemoryStore(Store):
    """Store double holding both tables in dicts.

    Set `fail_on[<method name>] = "message"` to make that call return a
    StoreError. Every call is appended to `calls` as (method, args).
    """

    def __init__(self) -> None:
        self.products: dict[str, Row] = {}
        self.history: list[Row] = []
        self.fail_on: dict[str, str] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._next_history_id = 1
        self._clock = datetime(2025, 4, 1, tzinfo=timezone.utc)

    def _check(self, method: str, *args: Any) -> StoreResult[Any] | None:
        self.calls.append((method, args))
        if method in self.fail_on:
            return StoreResult(error=StoreError(message=self.fail_on[method]))
        return None

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def select_products(self) -> StoreResult[list[Row]]:
        if failed := self._check("select_products"):
            return failed
        return StoreResult(data=[dict(row) for row in self.products.values()])

    async def insert_product(self, row: Row) -> StoreResult[None]:
        if failed := self._check("insert_product", row):
            return failed
        self.products[row["id"]] = dict(row)
        return StoreResult()

    async def update_product(self, product_id: str, fields: Row) -> StoreResult[None]:
        if failed := self._check("update_product", product_id, fields):
            return failed
        if product_id in self.products:
            self.products[product_id].update(fields)
        return StoreResult()

    async def delete_product(self, product_id: str) -> StoreResult[None]:
        if failed := self._check("delete_product", product_id):
            return failed
        self.products.pop(product_id, None)
        return StoreResult()

    async def insert_history(self, item_id: str, action: str) -> StoreResult[None]:
        if failed := self._check("insert_history", item_id, action):
            return failed
        self._clock += timedelta(minutes=1)
        self.history.append(
            {
                "id": self._next_history_id,
                "item_id": item_id,
                "action": action,
                "created_at": self._clock,
            }
        )
        self._next_history_id += 1
        return StoreResult()

    async def delete_history(self, item_id: str) -> StoreResult[None]:
        if failed := self._check("delete_history", item_id):
            return failed
        self.history = [h for h in self.history if h["item_id"] != item_id]
        return StoreResult()

    async def select_history(self) -> StoreResult[list[Row]]:
        if failed := self._check("select_history"):
            return failed
        rows = []
        for entry in sorted(self.history, key=lambda h: h["created_at"], reverse=True):
            item = self.products.get(entry["item_id"])
            rows.append(
                {
                    **entry,
                    "stock_items": {"name": item["name"], "quantity": item["quantity"]} if item else None,
                }
            )
        return StoreResult(data=rows)

    async def ping(self) -> bool:
        return "ping" not in self.fail_on


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def manager(store: InMemoryStore) -> InventoryManager:
    return InventoryManager(store)


@pytest_asyncio.fixture
async def client(manager: InventoryManager, store: InMemoryStore) -> AsyncGenerator[AsyncClient, None]:
    """API client wired to the in-memory store (lifespan is not run)."""
    from stockdash.api.deps import get_manager, get_store_dependency
    from stockdash.main import app

    app.dependency_overrides[get_manager] = lambda: manager
    app.dependency_overrides[get_store_dependency] = lambda: store
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
