"""Product catalogue port (abstract interface).

Defines the contract the checkout flow needs from the product catalogue:
price and stock reads, an atomic conditional stock decrement, and a
compensating increment. Adapters: InMemoryCatalog (dev/test) and
SqlAlchemyCatalog (SQLite/PostgreSQL).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from protean.exceptions import ValidationError


def to_decimal(value) -> Decimal:
    """Coerce a price to Decimal without passing through binary floating point."""
    return value if isinstance(value, Decimal) else Decimal(str(value))


PRICE_QUANTUM = Decimal("0.01")


def validate_levels(unit_price=None, stock_quantity=None):
    """Reject negative prices and stock levels, and sub-cent prices."""
    errors = {}
    if unit_price is not None:
        price = to_decimal(unit_price)
        if price < 0:
            errors["unit_price"] = ["Price cannot be negative"]
        elif price != price.quantize(PRICE_QUANTUM):
            errors["unit_price"] = ["Price cannot have more than two decimal places"]
    if stock_quantity is not None and stock_quantity < 0:
        errors["stock_quantity"] = ["Stock cannot be negative"]
    if errors:
        raise ValidationError(errors)


@dataclass(frozen=True)
class ProductSnapshot:
    """Price and stock of a product at the moment it was read."""

    product_id: str
    name: str
    unit_price: Decimal
    stock_quantity: int
    category: str | None = None
    updated_at: datetime | None = None

    @property
    def is_available(self) -> bool:
        return self.stock_quantity > 0


class ProductCatalog(ABC):
    """Abstract product catalogue interface."""

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @abstractmethod
    def get_product(self, product_id: str) -> ProductSnapshot:
        """Return the current snapshot. Raises ProductNotFound."""
        ...

    @abstractmethod
    def list_products(self) -> list[ProductSnapshot]:
        """Return every product, ordered by product id."""
        ...

    # -------------------------------------------------------------------
    # Stock movements used by checkout
    # -------------------------------------------------------------------
    @abstractmethod
    def decrement_stock(self, product_id: str, quantity: int) -> bool:
        """Atomically decrement stock if at least ``quantity`` is available.

        Returns False, without touching stock, when the product has less
        than ``quantity`` available. Raises ProductNotFound for unknown ids.
        """
        ...

    @abstractmethod
    def increment_stock(self, product_id: str, quantity: int) -> None:
        """Put stock back. Only used to compensate a decrement."""
        ...

    # -------------------------------------------------------------------
    # Catalogue management
    # -------------------------------------------------------------------
    @abstractmethod
    def add_product(
        self,
        product_id: str,
        name: str,
        unit_price: Decimal,
        stock_quantity: int,
        category: str | None = None,
    ) -> ProductSnapshot:
        """Register a new product."""
        ...

    @abstractmethod
    def restock(self, product_id: str, stock_quantity: int) -> ProductSnapshot:
        """Overwrite the stock level of a product."""
        ...

    @abstractmethod
    def set_price(self, product_id: str, unit_price: Decimal) -> ProductSnapshot:
        """Change the unit price. Existing orders keep their captured prices."""
        ...
