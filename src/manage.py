"""Storefront database management CLI.

Creates and drops the product catalogue table and, when the ordering
domain is configured with a SQL provider, the cart and order tables.
``seed`` loads a small demo catalogue.

Usage:
    python src/manage.py setup-db            # Create all tables
    python src/manage.py drop-db             # Drop all tables
    python src/manage.py seed [--stock 50]   # Insert demo products
"""

import argparse
import os
import sys
from decimal import Decimal

DEMO_PRODUCTS = [
    ("prod-001", "Espresso Grinder", Decimal("149.99"), "Kitchen"),
    ("prod-002", "Pour-Over Kettle", Decimal("54.50"), "Kitchen"),
    ("prod-003", "Ceramic Mug", Decimal("12.00"), "Kitchen"),
    ("prod-004", "Trail Running Shoes", Decimal("119.95"), "Outdoors"),
    ("prod-005", "Insulated Bottle", Decimal("24.99"), "Outdoors"),
]


def _sql_catalog():
    from catalogue.products import DEFAULT_DATABASE_URI
    from catalogue.products.sql_adapter import SqlAlchemyCatalog

    return SqlAlchemyCatalog(os.environ.get("CATALOG_DATABASE_URI", DEFAULT_DATABASE_URI))


def setup_databases(targets=None):
    """Create schemas for the specified (or all) targets."""
    targets = targets or ["catalogue", "ordering"]

    if "catalogue" in targets:
        print("Creating catalogue schema...")
        _sql_catalog().create_schema()
        print("  catalogue schema ready.")

    if "ordering" in targets:
        from ordering.domain import ordering
        from ordering.utils.db import setup_db

        print("Initializing ordering domain...")
        ordering.init()
        print("Creating ordering schema...")
        setup_db(ordering)
        print("  ordering schema ready.")

    print("Done.")


def drop_databases(targets=None):
    """Drop schemas for the specified (or all) targets."""
    targets = targets or ["catalogue", "ordering"]

    if "catalogue" in targets:
        print("Dropping catalogue schema...")
        _sql_catalog().drop_schema()
        print("  catalogue schema dropped.")

    if "ordering" in targets:
        from ordering.domain import ordering
        from ordering.utils.db import drop_db

        print("Initializing ordering domain...")
        ordering.init()
        print("Dropping ordering schema...")
        drop_db(ordering)
        print("  ordering schema dropped.")

    print("Done.")


def seed_catalogue(stock_quantity=50):
    """Insert the demo products, skipping any that already exist."""
    from protean.exceptions import ValidationError

    catalog = _sql_catalog()
    catalog.create_schema()
    for product_id, name, price, category in DEMO_PRODUCTS:
        try:
            catalog.add_product(product_id, name, price, stock_quantity, category=category)
            print(f"  added {product_id} ({name})")
        except ValidationError:
            print(f"  {product_id} already exists, skipped")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    setup_parser = subparsers.add_parser("setup-db", help="Create all database tables")
    setup_parser.add_argument(
        "--target",
        choices=["catalogue", "ordering"],
        nargs="*",
        help="Specific schema(s) to set up (default: all)",
    )

    drop_parser = subparsers.add_parser("drop-db", help="Drop all database tables")
    drop_parser.add_argument(
        "--target",
        choices=["catalogue", "ordering"],
        nargs="*",
        help="Specific schema(s) to drop (default: all)",
    )

    seed_parser = subparsers.add_parser("seed", help="Insert demo products into the catalogue")
    seed_parser.add_argument("--stock", type=int, default=50, help="Initial stock per product")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases(args.target)
    elif args.command == "drop-db":
        drop_databases(args.target)
    elif args.command == "seed":
        seed_catalogue(args.stock)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
