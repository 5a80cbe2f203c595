"""In-memory product catalogue for development and testing.

All stock mutations are serialised by a single lock, so the check and the
decrement in ``decrement_stock`` happen as one step even when many request
threads reserve the same product at once.
"""

import threading
from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal

from protean.exceptions import ValidationError
from shared.errors import ProductNotFound

from catalogue.products.port import ProductCatalog, ProductSnapshot, to_decimal, validate_levels


class InMemoryCatalog(ProductCatalog):
    """Catalogue backed by a dict of immutable snapshots."""

    def __init__(self):
        self._products: dict[str, ProductSnapshot] = {}
        self._lock = threading.Lock()

    def get_product(self, product_id: str) -> ProductSnapshot:
        try:
            return self._products[str(product_id)]
        except KeyError:
            raise ProductNotFound(str(product_id)) from None

    def list_products(self) -> list[ProductSnapshot]:
        return sorted(self._products.values(), key=lambda p: p.product_id)

    def decrement_stock(self, product_id: str, quantity: int) -> bool:
        with self._lock:
            product = self.get_product(product_id)
            if product.stock_quantity < quantity:
                return False
            self._products[product.product_id] = replace(
                product,
                stock_quantity=product.stock_quantity - quantity,
                updated_at=datetime.now(UTC),
            )
            return True

    def increment_stock(self, product_id: str, quantity: int) -> None:
        with self._lock:
            product = self.get_product(product_id)
            self._products[product.product_id] = replace(
                product,
                stock_quantity=product.stock_quantity + quantity,
                updated_at=datetime.now(UTC),
            )

    def add_product(self, product_id, name, unit_price, stock_quantity, category=None) -> ProductSnapshot:
        validate_levels(unit_price=unit_price, stock_quantity=stock_quantity)
        with self._lock:
            if str(product_id) in self._products:
                raise ValidationError({"product_id": [f"Product {product_id} already exists"]})
            product = ProductSnapshot(
                product_id=str(product_id),
                name=name,
                unit_price=to_decimal(unit_price),
                stock_quantity=stock_quantity,
                category=category,
                updated_at=datetime.now(UTC),
            )
            self._products[product.product_id] = product
            return product

    def restock(self, product_id: str, stock_quantity: int) -> ProductSnapshot:
        validate_levels(stock_quantity=stock_quantity)
        with self._lock:
            product = replace(
                self.get_product(product_id),
                stock_quantity=stock_quantity,
                updated_at=datetime.now(UTC),
            )
            self._products[product.product_id] = product
            return product

    def set_price(self, product_id: str, unit_price: Decimal) -> ProductSnapshot:
        validate_levels(unit_price=unit_price)
        with self._lock:
            product = replace(
                self.get_product(product_id),
                unit_price=to_decimal(unit_price),
                updated_at=datetime.now(UTC),
            )
            self._products[product.product_id] = product
            return product

    def reset(self):
        """Drop every product (useful between tests)."""
        with self._lock:
            self._products.clear()
