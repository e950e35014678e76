"""Client-side product list filtering."""

from collections.abc import Iterable

from stockdash.schemas.product import Product


def filter_products(
    products: Iterable[Product],
    search: str | None = None,
    category: str | None = None,
) -> list[Product]:
    """Filter by case-insensitive name substring and exact category.

    Empty or missing criteria match everything.
    """
    term = (search or "").strip().lower()
    out = []
    for p in products:
        if term and term not in p.name.lower():
            continue
        if category and p.category != category:
            continue
        out.append(p)
    return out
