"""Product catalogue factory.

Provides get_catalog() / set_catalog() to swap implementations:
- InMemoryCatalog for development and testing (default)
- SqlAlchemyCatalog for SQLite/PostgreSQL, selected with
  CATALOG_ADAPTER=sql and CATALOG_DATABASE_URI
"""

import os

from catalogue.products.port import ProductCatalog

DEFAULT_DATABASE_URI = "sqlite:///storefront.db"

_current_catalog: ProductCatalog | None = None


def get_catalog() -> ProductCatalog:
    """Return the current product catalogue (singleton)."""
    global _current_catalog
    if _current_catalog is None:
        adapter = os.environ.get("CATALOG_ADAPTER", "memory")
        if adapter == "memory":
            from catalogue.products.memory_adapter import InMemoryCatalog

            _current_catalog = InMemoryCatalog()
        elif adapter == "sql":
            from catalogue.products.sql_adapter import SqlAlchemyCatalog

            _current_catalog = SqlAlchemyCatalog(os.environ.get("CATALOG_DATABASE_URI", DEFAULT_DATABASE_URI))
        else:
            raise ValueError(f"Unknown catalog adapter: {adapter}")
    return _current_catalog


def set_catalog(catalog: ProductCatalog) -> None:
    """Override the active catalogue (useful for tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    """Reset to the default catalogue."""
    global _current_catalog
    _current_catalog = None
