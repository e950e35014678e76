"""CSV export of the product list."""

import csv
import io
from collections.abc import Iterable

from stockdash.schemas.product import Product

EXPORT_HEADERS = ["Name", "Category", "Price (RWF)", "Stock"]
EXPORT_FILENAME = "inventory-products.csv"
EXPORT_MEDIA_TYPE = "text/csv; charset=utf-8"


def format_price(value: float) -> str:
    """Format a number the way en-US locale formatting does.

    Thousands separators, at most three fraction digits, no trailing zeros:
    1000 -> "1,000", 1234.5 -> "1,234.5", 0.1234 -> "0.123".
    """
    text = f"{value:,.3f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        return "0"
    return text


def export_rows(products: Iterable[Product]) -> list[list[str]]:
    """Header row followed by one row per product."""
    rows = [list(EXPORT_HEADERS)]
    for p in products:
        rows.append([p.name, p.category or "", format_price(p.price), str(p.stock)])
    return rows


def render_products_csv(products: Iterable[Product]) -> str:
    """Render products as newline-separated CSV text.

    Fields holding commas (such as "1,000") are quoted so they stay in
    one column.
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerows(export_rows(products))
    return output.getvalue().removesuffix("\n")
