"""Inventory ledger: per-product available quantity with conditional reservation.

The ledger never increases stock on its own: ``release`` exists only to
compensate a reservation taken earlier in the same checkout attempt.
Restocking is a catalogue-management concern.
"""

import structlog
from catalogue.products import get_catalog
from catalogue.products.port import ProductCatalog, ProductSnapshot
from protean.exceptions import ValidationError

logger = structlog.get_logger(__name__)


def _require_positive(quantity):
    if quantity is None or quantity < 1:
        raise ValidationError({"quantity": ["Quantity must be at least 1"]})


class InventoryLedger:
    def __init__(self, catalog: ProductCatalog | None = None):
        self._catalog = catalog

    @property
    def catalog(self) -> ProductCatalog:
        return self._catalog if self._catalog is not None else get_catalog()

    def snapshot(self, product_id: str) -> ProductSnapshot:
        """Current price and stock of a product. Raises ProductNotFound."""
        return self.catalog.get_product(product_id)

    def get_available(self, product_id: str) -> int:
        return self.snapshot(product_id).stock_quantity

    def try_reserve(self, product_id: str, quantity: int) -> bool:
        """Decrement stock by ``quantity`` if that much is available.

        The check and the decrement are one atomic step in the catalogue, so
        concurrent reservations for the same product serialise and can never
        jointly overdraw it.
        """
        _require_positive(quantity)
        reserved = self.catalog.decrement_stock(product_id, quantity)
        if not reserved:
            logger.warning("Reservation refused", product_id=str(product_id), quantity=quantity)
        return reserved

    def release(self, product_id: str, quantity: int) -> None:
        """Return a reservation taken by this process to stock."""
        _require_positive(quantity)
        self.catalog.increment_stock(product_id, quantity)
        logger.info("Reservation released", product_id=str(product_id), quantity=quantity)
