"""Integration tests for the SQLAlchemy catalogue against a file-backed SQLite database."""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from catalogue.products.sql_adapter import SqlAlchemyCatalog
from protean.exceptions import ValidationError
from shared.errors import PersistenceFailure, ProductNotFound
from sqlalchemy import create_engine


@pytest.fixture()
def sql_catalog(tmp_path):
    catalog = SqlAlchemyCatalog(f"sqlite:///{tmp_path / 'catalogue.db'}")
    catalog.create_schema()
    yield catalog
    catalog.drop_schema()
    catalog.engine.dispose()


class TestSqlCatalog:
    def test_add_and_get(self, sql_catalog):
        sql_catalog.add_product("prod-001", "Mug", Decimal("12.99"), 5, category="Kitchen")
        product = sql_catalog.get_product("prod-001")
        assert product.unit_price == Decimal("12.99")
        assert product.stock_quantity == 5
        assert product.category == "Kitchen"

    def test_duplicate_product(self, sql_catalog):
        sql_catalog.add_product("prod-001", "Mug", "1.00", 1)
        with pytest.raises(ValidationError):
            sql_catalog.add_product("prod-001", "Mug", "1.00", 1)

    def test_unknown_product(self, sql_catalog):
        with pytest.raises(ProductNotFound):
            sql_catalog.get_product("prod-404")
        with pytest.raises(ProductNotFound):
            sql_catalog.decrement_stock("prod-404", 1)
        with pytest.raises(ProductNotFound):
            sql_catalog.increment_stock("prod-404", 1)
        with pytest.raises(ProductNotFound):
            sql_catalog.restock("prod-404", 1)

    def test_conditional_decrement(self, sql_catalog):
        sql_catalog.add_product("prod-001", "Mug", "1.00", 5)
        assert sql_catalog.decrement_stock("prod-001", 3) is True
        assert sql_catalog.decrement_stock("prod-001", 3) is False
        assert sql_catalog.get_product("prod-001").stock_quantity == 2

    def test_increment(self, sql_catalog):
        sql_catalog.add_product("prod-001", "Mug", "1.00", 0)
        sql_catalog.increment_stock("prod-001", 4)
        assert sql_catalog.get_product("prod-001").stock_quantity == 4

    def test_restock_and_price(self, sql_catalog):
        sql_catalog.add_product("prod-001", "Mug", "1.00", 0)
        assert sql_catalog.restock("prod-001", 9).stock_quantity == 9
        assert sql_catalog.set_price("prod-001", "2.50").unit_price == Decimal("2.50")

    def test_sub_cent_price_rejected_before_the_column_rounds_it(self, sql_catalog):
        sql_catalog.add_product("prod-001", "Mug", "1.00", 1)
        with pytest.raises(ValidationError):
            sql_catalog.set_price("prod-001", "2.505")
        with pytest.raises(ValidationError):
            sql_catalog.add_product("prod-002", "Mug", Decimal("0.125"), 1)

        assert sql_catalog.get_product("prod-001").unit_price == Decimal("1.00")
        assert [p.product_id for p in sql_catalog.list_products()] == ["prod-001"]

    def test_list_products(self, sql_catalog):
        sql_catalog.add_product("prod-b", "B", "1.00", 1)
        sql_catalog.add_product("prod-a", "A", "1.00", 1)
        assert [p.product_id for p in sql_catalog.list_products()] == ["prod-a", "prod-b"]

    def test_concurrent_decrements_never_oversell(self, sql_catalog):
        sql_catalog.add_product("prod-hot", "Hot item", "5.00", 10)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: sql_catalog.decrement_stock("prod-hot", 3), range(8)))

        assert results.count(True) == 3
        assert sql_catalog.get_product("prod-hot").stock_quantity == 1

    def test_missing_table_is_a_persistence_failure(self, tmp_path):
        catalog = SqlAlchemyCatalog(engine=create_engine(f"sqlite:///{tmp_path / 'empty.db'}"))
        with pytest.raises(PersistenceFailure) as exc_info:
            catalog.get_product("prod-001")
        assert exc_info.value.retryable

    def test_requires_uri_or_engine(self):
        with pytest.raises(ValueError):
            SqlAlchemyCatalog()
