"""Tests for the inventory ledger's reservation semantics."""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from catalogue.products.memory_adapter import InMemoryCatalog
from inventory.ledger import InventoryLedger
from protean.exceptions import ValidationError
from shared.errors import ProductNotFound


@pytest.fixture()
def ledger():
    catalog = InMemoryCatalog()
    catalog.add_product("prod-001", "Mug", Decimal("12.00"), 5)
    return InventoryLedger(catalog)


class TestInventoryLedger:
    def test_get_available(self, ledger):
        assert ledger.get_available("prod-001") == 5

    def test_unknown_product(self, ledger):
        with pytest.raises(ProductNotFound):
            ledger.get_available("prod-404")

    def test_reserve_takes_stock(self, ledger):
        assert ledger.try_reserve("prod-001", 3) is True
        assert ledger.get_available("prod-001") == 2

    def test_refused_reservation_leaves_stock(self, ledger):
        assert ledger.try_reserve("prod-001", 6) is False
        assert ledger.get_available("prod-001") == 5

    def test_release_returns_stock(self, ledger):
        ledger.try_reserve("prod-001", 3)
        ledger.release("prod-001", 3)
        assert ledger.get_available("prod-001") == 5

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_must_be_positive(self, ledger, quantity):
        with pytest.raises(ValidationError):
            ledger.try_reserve("prod-001", quantity)
        with pytest.raises(ValidationError):
            ledger.release("prod-001", quantity)

    def test_defaults_to_active_catalogue(self, catalog):
        catalog.add_product("prod-009", "Bottle", "3.00", 2)
        assert InventoryLedger().get_available("prod-009") == 2


class TestConcurrentReservations:
    def test_hot_product_is_never_oversold(self, ledger):
        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(lambda _: ledger.try_reserve("prod-001", 1), range(50)))

        assert results.count(True) == 5
        assert ledger.get_available("prod-001") == 0

    def test_two_checkouts_for_same_stock(self, ledger):
        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(lambda _: ledger.try_reserve("prod-001", 3), range(2)))

        assert sorted(results) == [False, True]
        assert ledger.get_available("prod-001") == 2
