"""Inventory state management and derived data."""

from stockdash.core.inventory import InventoryManager, validate_product
from stockdash.core.notifications import Notifier, collect_notifications
from stockdash.services import get_store

# Singleton instance (set up by the application lifespan)
_manager: InventoryManager | None = None


def get_inventory_manager() -> InventoryManager:
    """Get the inventory manager singleton, creating it on first use."""
    global _manager
    if _manager is None:
        _manager = InventoryManager(get_store())
    return _manager


def reset_inventory_manager() -> None:
    """Close and forget the manager singleton."""
    global _manager
    if _manager is not None:
        _manager.close()
        _manager = None


__all__ = [
    "InventoryManager",
    "Notifier",
    "collect_notifications",
    "get_inventory_manager",
    "reset_inventory_manager",
    "validate_product",
]
