"""Category derivation.

Categories are not stored; they are synthesized from the product list plus
the categories a user declared before any product used them. Callers go
through these functions so the storage choice can change without touching
them.
"""

from collections.abc import Iterable

from stockdash.schemas.product import Product


def derive_categories(products: Iterable[Product], declared: Iterable[str] = ()) -> list[str]:
    """Distinct non-empty categories in first-appearance order.

    Product categories come first, then declared categories not already seen.
    """
    seen: dict[str, None] = {}
    for product in products:
        if product.category:
            seen.setdefault(product.category, None)
    for name in declared:
        if name:
            seen.setdefault(name, None)
    return list(seen)


def count_products_in_category(products: Iterable[Product], name: str) -> int:
    """Number of products tagged with exactly `name`."""
    return sum(1 for p in products if p.category == name)
