"""Dashboard statistics derived from the product list.

All functions are pure and recomputed from whatever list they are given.
"""

from collections.abc import Sequence

from stockdash.schemas.product import DashboardStats, Product

# Fixed policy, not configurable
LOW_STOCK_THRESHOLD = 10


def total_products(products: Sequence[Product]) -> int:
    return len(products)


def total_inventory_value(products: Sequence[Product]) -> float:
    """Sum of price * stock over all products."""
    return sum(p.price * p.stock for p in products)


def low_stock_count(products: Sequence[Product], threshold: int = LOW_STOCK_THRESHOLD) -> int:
    """Products whose stock is at or below the threshold."""
    return sum(1 for p in products if p.stock <= threshold)


def recent_orders_count(products: Sequence[Product]) -> int:
    # No order data source exists yet.
    return 0


def compute_dashboard_stats(products: Sequence[Product]) -> DashboardStats:
    """Bundle all dashboard aggregates for one product list."""
    return DashboardStats(
        total_products=total_products(products),
        total_value=total_inventory_value(products),
        low_stock_count=low_stock_count(products),
        recent_orders=recent_orders_count(products),
    )
