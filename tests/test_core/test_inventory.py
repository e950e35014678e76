"""Tests for the inventory state manager."""

import asyncio

import pytest

from stockdash.core.inventory import InventoryManager, validate_product
from stockdash.schemas.product import HistoryAction, NewProduct, Product
from stockdash.services.store import StoreResult


def _widget(**overrides) -> NewProduct:
    data = {"name": "Widget", "category": "Tools", "stock": 3, "price": 1000}
    data.update(overrides)
    return NewProduct(**data)


def _seed(store, product_id: str, name: str, category: str | None, quantity: int, price: float) -> None:
    store.products[product_id] = {
        "id": product_id,
        "name": name,
        "category": category,
        "quantity": quantity,
        "price": price,
    }


class TestValidateProduct:
    def test_valid(self):
        assert validate_product(_widget()) == []

    def test_zero_stock_and_price_are_valid(self):
        assert validate_product(_widget(stock=0, price=0)) == []

    @pytest.mark.parametrize(
        "overrides",
        [{"name": ""}, {"name": "   "}, {"stock": -1}, {"price": -0.01}, {"price": float("nan")}],
    )
    def test_invalid(self, overrides):
        assert validate_product(_widget(**overrides))


class TestFetchProducts:
    @pytest.mark.asyncio
    async def test_starts_loading_and_clears_after_fetch(self, manager: InventoryManager, store):
        assert manager.is_loading is True
        assert await manager.fetch_products() is True
        assert manager.is_loading is False

    @pytest.mark.asyncio
    async def test_maps_quantity_to_stock_and_derives_categories(self, manager: InventoryManager, store):
        _seed(store, "a", "Hammer", "Tools", 4, 12.5)
        _seed(store, "b", "Apple", "Food", 40, 1)
        _seed(store, "c", "Loose", None, 1, 1)

        await manager.fetch_products()

        hammer = manager.get_product("a")
        assert hammer is not None
        assert hammer.stock == 4
        assert hammer.price == 12.5
        assert manager.categories == ["Tools", "Food"]

    @pytest.mark.asyncio
    async def test_failure_keeps_prior_state_and_notifies(self, manager: InventoryManager, store):
        _seed(store, "a", "Hammer", "Tools", 4, 12.5)
        await manager.fetch_products()
        manager.drain_notifications()

        store.fail_on["select_products"] = "connection reset"
        assert await manager.fetch_products() is False

        assert [p.id for p in manager.products] == ["a"]
        assert manager.categories == ["Tools"]
        notes = manager.drain_notifications()
        assert notes[-1].title == "Failed to load products"
        assert notes[-1].description == "connection reset"
        assert notes[-1].variant == "destructive"

    @pytest.mark.asyncio
    async def test_failure_still_clears_loading(self, manager: InventoryManager, store):
        store.fail_on["select_products"] = "down"
        await manager.fetch_products()
        assert manager.is_loading is False

    @pytest.mark.asyncio
    async def test_malformed_rows_are_reported(self, manager: InventoryManager, store):
        store.products["x"] = {"id": "x"}
        assert await manager.fetch_products() is False
        assert manager.drain_notifications()[-1].title == "An unexpected error occurred"

    @pytest.mark.asyncio
    async def test_declared_categories_survive_refresh(self, manager: InventoryManager, store):
        _seed(store, "a", "Hammer", "Tools", 4, 12.5)
        manager.add_category("Garden")

        await manager.fetch_products()

        assert manager.categories == ["Tools", "Garden"]


class TestAddProduct:
    @pytest.mark.asyncio
    async def test_add_then_fetch_round_trips(self, manager: InventoryManager, store):
        assert await manager.add_product(_widget()) is True
        await manager.fetch_products()

        [product] = manager.products
        assert (product.name, product.category, product.stock, product.price) == ("Widget", "Tools", 3, 1000)

    @pytest.mark.asyncio
    async def test_generates_id_and_records_history(self, manager: InventoryManager, store):
        product = await manager.create_product(_widget())

        assert product is not None
        assert product.id in store.products
        assert store.products[product.id]["quantity"] == 3
        assert store.call_names() == ["insert_product", "insert_history"]
        assert store.history[0]["action"] == HistoryAction.ADDED.value
        assert store.history[0]["item_id"] == product.id

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, manager: InventoryManager):
        first = await manager.create_product(_widget())
        second = await manager.create_product(_widget())
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_new_category_is_added_once(self, manager: InventoryManager):
        await manager.add_product(_widget())
        await manager.add_product(_widget(name="Spanner"))
        await manager.add_product(_widget(name="Loose", category=None))
        assert manager.categories == ["Tools"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [{"name": ""}, {"stock": -5}, {"price": -1}],
    )
    async def test_invalid_input_never_reaches_store(self, manager: InventoryManager, store, overrides):
        assert await manager.add_product(_widget(**overrides)) is False
        assert store.calls == []
        assert manager.products == []
        assert manager.drain_notifications()[-1].title == "Failed to add product"

    @pytest.mark.asyncio
    async def test_insert_failure_leaves_state_untouched(self, manager: InventoryManager, store):
        store.fail_on["insert_product"] = "duplicate key"

        assert await manager.add_product(_widget()) is False
        assert manager.products == []
        assert manager.categories == []
        assert "insert_history" not in store.call_names()
        assert manager.drain_notifications()[-1].description == "duplicate key"

    @pytest.mark.asyncio
    async def test_history_failure_does_not_roll_back(self, manager: InventoryManager, store):
        store.fail_on["insert_history"] = "permission denied"

        assert await manager.add_product(_widget()) is True
        assert len(manager.products) == 1
        assert len(store.products) == 1
        assert manager.drain_notifications()[-1].title == "Product added"


class TestUpdateProduct:
    @pytest.mark.asyncio
    async def test_replaces_local_product(self, manager: InventoryManager, store):
        product = await manager.create_product(_widget())
        updated = product.model_copy(update={"stock": 9, "category": "Hardware"})

        assert await manager.update_product(updated) is True

        assert manager.get_product(product.id).stock == 9
        assert store.products[product.id]["quantity"] == 9
        assert "Hardware" in manager.categories
        assert store.history[-1]["action"] == "updated"

    @pytest.mark.asyncio
    async def test_invalid_update_is_rejected_locally(self, manager: InventoryManager, store):
        product = await manager.create_product(_widget())
        store.calls.clear()

        assert await manager.update_product(product.model_copy(update={"price": -3})) is False
        assert store.calls == []
        assert manager.get_product(product.id).price == 1000

    @pytest.mark.asyncio
    async def test_unknown_product(self, manager: InventoryManager, store):
        ghost = Product(id="missing", name="Ghost", category=None, stock=1, price=1)
        assert await manager.update_product(ghost) is False
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_store_failure_keeps_old_version(self, manager: InventoryManager, store):
        product = await manager.create_product(_widget())
        store.fail_on["update_product"] = "timeout"

        assert await manager.update_product(product.model_copy(update={"stock": 1})) is False
        assert manager.get_product(product.id).stock == 3


class TestDeleteProduct:
    @pytest.mark.asyncio
    async def test_deletes_history_first_then_product(self, manager: InventoryManager, store):
        product = await manager.create_product(_widget())
        await manager.update_product(product.model_copy(update={"stock": 4}))
        store.calls.clear()

        assert await manager.delete_product(product.id) is True

        assert store.call_names() == ["delete_history", "delete_product"]
        assert store.history == []
        assert manager.products == []
        await manager.fetch_products()
        assert manager.products == []

    @pytest.mark.asyncio
    async def test_history_failure_aborts(self, manager: InventoryManager, store):
        product = await manager.create_product(_widget())
        store.fail_on["delete_history"] = "rls violation"
        store.calls.clear()

        assert await manager.delete_product(product.id) is False

        assert store.call_names() == ["delete_history"]
        assert product.id in store.products
        assert manager.get_product(product.id) is not None
        note = manager.drain_notifications()[-1]
        assert "history" in note.description
        assert "rls violation" in note.description

    @pytest.mark.asyncio
    async def test_product_failure_after_history_is_surfaced(self, manager: InventoryManager, store):
        product = await manager.create_product(_widget())
        store.fail_on["delete_product"] = "locked"

        assert await manager.delete_product(product.id) is False

        assert manager.get_product(product.id) is not None
        note = manager.drain_notifications()[-1]
        assert note.description.startswith("History was removed")


class TestCategories:
    def test_add_twice_succeeds_then_fails(self, manager: InventoryManager):
        assert manager.add_category("Garden") is True
        assert manager.add_category("Garden") is False
        assert manager.categories.count("Garden") == 1
        assert manager.drain_notifications()[-1].title == "Category exists"

    def test_input_is_trimmed(self, manager: InventoryManager):
        assert manager.add_category("  Garden ") is True
        assert manager.add_category("Garden") is False
        assert manager.categories == ["Garden"]

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_is_rejected(self, manager: InventoryManager, name):
        assert manager.add_category(name) is False
        assert manager.categories == []

    def test_duplicates_are_case_sensitive(self, manager: InventoryManager):
        assert manager.add_category("garden") is True
        assert manager.add_category("Garden") is True

    def test_add_category_makes_no_store_call(self, manager: InventoryManager, store):
        manager.add_category("Garden")
        manager.delete_category("Garden")
        assert store.calls == []

    def test_delete_unreferenced(self, manager: InventoryManager):
        manager.add_category("Garden")
        assert manager.delete_category("Garden") is True
        assert manager.categories == []

    @pytest.mark.asyncio
    async def test_delete_referenced_is_blocked(self, manager: InventoryManager):
        await manager.add_product(_widget())
        await manager.add_product(_widget(name="Spanner"))

        assert manager.delete_category("Tools") is False

        assert manager.categories == ["Tools"]
        note = manager.drain_notifications()[-1]
        assert note.title == "Cannot delete category"
        assert "2 products" in note.description


class TestHistory:
    @pytest.mark.asyncio
    async def test_newest_first_with_joined_product(self, manager: InventoryManager):
        product = await manager.create_product(_widget())
        await manager.update_product(product.model_copy(update={"stock": 7}))

        entries = await manager.list_history()

        assert [e.action for e in entries] == [HistoryAction.UPDATED, HistoryAction.ADDED]
        assert entries[0].product_name == "Widget"
        assert entries[0].quantity == 7
        assert entries[0].quantity_label == "+7"

    @pytest.mark.asyncio
    async def test_malformed_rows_are_skipped(self, manager: InventoryManager, store):
        await manager.create_product(_widget())
        original = store.select_history

        async def with_bad_rows():
            result = await original()
            return StoreResult(data=[None, {"id": 99}, *result.data])

        store.select_history = with_bad_rows

        entries = await manager.list_history()

        assert [e.action for e in entries] == [HistoryAction.ADDED]

    @pytest.mark.asyncio
    async def test_failure_returns_empty_list(self, manager: InventoryManager, store):
        store.fail_on["select_history"] = "boom"
        assert await manager.list_history() == []
        assert manager.drain_notifications()[-1].title == "Failed to load history"


class TestDerivedData:
    @pytest.mark.asyncio
    async def test_stats_follow_product_list(self, manager: InventoryManager):
        await manager.add_product(_widget(price=100, stock=2))
        first = manager.stats()
        assert first.total_value == 200
        assert manager.stats() is first

        await manager.add_product(_widget(name="Nut", price=50, stock=1))
        second = manager.stats()
        assert second.total_value == 250
        assert second.total_products == 2
        assert second.low_stock_count == 2

    @pytest.mark.asyncio
    async def test_export_uses_current_products(self, manager: InventoryManager):
        await manager.add_product(_widget())
        assert manager.export_csv().split("\n")[1] == 'Widget,Tools,"1,000",3'

    @pytest.mark.asyncio
    async def test_filter_products(self, manager: InventoryManager):
        await manager.add_product(_widget())
        await manager.add_product(_widget(name="Apple", category="Food"))
        assert [p.name for p in manager.filter_products(category="Food")] == ["Apple"]
        assert [p.name for p in manager.filter_products(search="widg")] == ["Widget"]


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_adds_are_serialized(self, manager: InventoryManager, store):
        in_flight = 0
        peak = 0
        original = store.insert_product

        async def slow_insert(row):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return await original(row)

        store.insert_product = slow_insert

        results = await asyncio.gather(
            manager.add_product(_widget(name="A")),
            manager.add_product(_widget(name="B")),
            manager.add_product(_widget(name="C")),
        )

        assert results == [True, True, True]
        assert peak == 1
        assert sorted(p.name for p in manager.products) == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_fetch_waits_for_pending_mutation(self, manager: InventoryManager, store):
        release = asyncio.Event()
        original = store.insert_product

        async def gated_insert(row):
            await release.wait()
            return await original(row)

        store.insert_product = gated_insert

        add_task = asyncio.create_task(manager.add_product(_widget()))
        await asyncio.sleep(0)
        fetch_task = asyncio.create_task(manager.fetch_products())
        await asyncio.sleep(0)
        release.set()
        await asyncio.gather(add_task, fetch_task)

        assert [p.name for p in manager.products] == ["Widget"]

    @pytest.mark.asyncio
    async def test_update_queued_behind_delete_is_rejected(self, manager: InventoryManager, store):
        product = await manager.create_product(_widget())
        release = asyncio.Event()
        original = store.delete_history

        async def gated_delete_history(item_id):
            await release.wait()
            return await original(item_id)

        store.delete_history = gated_delete_history
        manager.drain_notifications()
        store.calls.clear()

        delete_task = asyncio.create_task(manager.delete_product(product.id))
        await asyncio.sleep(0)
        update_task = asyncio.create_task(
            manager.update_product(product.model_copy(update={"stock": 9}))
        )
        await asyncio.sleep(0)
        release.set()
        deleted, updated = await asyncio.gather(delete_task, update_task)

        assert deleted is True
        assert updated is False
        assert store.products == {}
        assert store.history == []
        assert "update_product" not in store.call_names()
        assert [n.title for n in manager.drain_notifications()] == [
            "Product deleted",
            "Failed to update product",
        ]

    @pytest.mark.asyncio
    async def test_results_after_close_are_discarded(self, manager: InventoryManager, store):
        _seed(store, "a", "Hammer", "Tools", 4, 12.5)
        release = asyncio.Event()
        original = store.select_products

        async def gated_select():
            await release.wait()
            return await original()

        store.select_products = gated_select

        fetch_task = asyncio.create_task(manager.fetch_products())
        await asyncio.sleep(0)
        manager.close()
        release.set()

        assert await fetch_task is False
        assert manager.products == []
        assert manager.is_closed is True


@pytest.mark.asyncio
async def test_widget_scenario(manager: InventoryManager, store):
    assert await manager.add_product(_widget()) is True
    assert await manager.fetch_products() is True

    [widget] = manager.products
    assert widget.name == "Widget"
    assert "Tools" in manager.categories

    assert manager.delete_category("Tools") is False
    assert "1 products" in manager.drain_notifications()[-1].description

    assert await manager.delete_product(widget.id) is True
    assert manager.delete_category("Tools") is True
    assert "Tools" not in manager.categories
