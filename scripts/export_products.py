#!/usr/bin/env python
"""Export the product list to CSV from the command line.

Fetches products straight from the configured store and writes the same
file the dashboard's "Export CSV" button offers.

Usage:
    # Write inventory-products.csv in the current directory
    python scripts/export_products.py

    # Choose the output path and store
    python scripts/export_products.py \
        --output /tmp/products.csv \
        --store-url https://example.supabase.co \
        --anon-key "$STORE_ANON_KEY"

    # Print to stdout
    python scripts/export_products.py --output -
"""

import argparse
import asyncio
import sys
from pathlib import Path

from stockdash.core import InventoryManager
from stockdash.core.export import EXPORT_FILENAME
from stockdash.infra.logging import setup_logging
from stockdash.services import RestStore, SqlStore, Store, get_store


def build_store(args: argparse.Namespace) -> Store:
    """Store from CLI overrides, falling back to settings."""
    if args.sql:
        return SqlStore()
    if args.store_url or args.anon_key:
        return RestStore(base_url=args.store_url, anon_key=args.anon_key)
    return get_store()


async def export(args: argparse.Namespace) -> int:
    store = build_store(args)
    manager = InventoryManager(store)
    try:
        ok = await manager.fetch_products()
    finally:
        await store.close()

    for notification in manager.drain_notifications():
        print(f"{notification.title}: {notification.description}", file=sys.stderr)
    if not ok:
        return 1

    content = manager.export_csv()
    if args.output == "-":
        print(content)
    else:
        path = Path(args.output)
        path.write_text(content + "\n", encoding="utf-8")
        print(f"Wrote {len(manager.products)} products to {path}", file=sys.stderr)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Export inventory products to CSV")
    parser.add_argument(
        "--output",
        "-o",
        default=EXPORT_FILENAME,
        help=f"Output file, '-' for stdout (default: {EXPORT_FILENAME})",
    )
    parser.add_argument("--store-url", help="Hosted backend URL (overrides STORE_URL)")
    parser.add_argument("--anon-key", help="Anon key (overrides STORE_ANON_KEY)")
    parser.add_argument("--sql", action="store_true", help="Read directly from the database")
    args = parser.parse_args()

    setup_logging()
    return asyncio.run(export(args))


if __name__ == "__main__":
    sys.exit(main())
