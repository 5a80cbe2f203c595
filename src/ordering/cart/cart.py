"""Shopping Cart aggregate (CQRS): one mutable cart per customer.

The cart holds at most one line per product. Quantities are always
positive: setting a line to zero removes it. Prices are never stored on
the cart; they are read from the catalogue at display and checkout time.
"""

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer
from shared.errors import CartLineNotFound

from ordering.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartReconciled,
)
from ordering.domain import ordering


@dataclass(frozen=True)
class CartAdjustment:
    """A change made to a cart line by reconciliation."""

    product_id: str
    action: str  # "removed" | "clamped"
    previous_quantity: int
    new_quantity: int

    def to_dict(self):
        return asdict(self)


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@ordering.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(item.product_id) for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product may appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def find_item(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def quantity_of(self, product_id) -> int:
        item = self.find_item(product_id)
        return item.quantity if item else 0

    def lines(self) -> list[tuple[str, int]]:
        """(product_id, quantity) pairs in ascending product-id order."""
        return sorted((str(i.product_id), i.quantity) for i in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity):
        """Add a product, or increase its line quantity if already present.

        Returns the resulting line quantity.
        """
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        existing = self.find_item(product_id)
        if existing:
            existing.quantity += quantity
            line_quantity = existing.quantity
        else:
            self.add_items(CartItem(product_id=product_id, quantity=quantity, added_at=now))
            line_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=line_quantity,
            )
        )
        return line_quantity

    def update_item_quantity(self, product_id, new_quantity):
        """Set a line's quantity. Zero removes the line."""
        if new_quantity is None or new_quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        item = self.find_item(product_id)
        if item is None:
            raise CartLineNotFound(str(self.customer_id), str(product_id))

        if new_quantity == 0:
            self.remove_item(product_id)
            return

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, product_id):
        """Remove a product line from the cart."""
        item = self.find_item(product_id)
        if item is None:
            raise CartLineNotFound(str(self.customer_id), str(product_id))

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))

    def remove_products(self, product_ids) -> int:
        """Remove several lines at once. Unknown ids are skipped.

        Returns the number of lines removed.
        """
        removed = 0
        for product_id in dict.fromkeys(str(p) for p in product_ids):
            if self.find_item(product_id) is not None:
                self.remove_item(product_id)
                removed += 1
        return removed

    def empty(self) -> int:
        """Remove every line. Returns the number of lines removed."""
        lines_removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)

        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                lines_removed=lines_removed,
            )
        )
        return lines_removed

    # -------------------------------------------------------------------
    # Reconciliation against current stock
    # -------------------------------------------------------------------
    def reconcile(self, available_by_product) -> list[CartAdjustment]:
        """Clamp each line to the stock available for its product.

        ``available_by_product`` maps product id to available quantity; a
        product missing from the map counts as unavailable. Lines with no
        stock are removed. Running it twice against the same stock levels
        changes nothing the second time.
        """
        adjustments = []
        for product_id, quantity in self.lines():
            available = max(available_by_product.get(product_id, 0), 0)
            if available >= quantity:
                continue

            item = self.find_item(product_id)
            if available == 0:
                self.remove_items(item)
                adjustments.append(CartAdjustment(product_id, "removed", quantity, 0))
            else:
                item.quantity = available
                adjustments.append(CartAdjustment(product_id, "clamped", quantity, available))

        if adjustments:
            self.updated_at = datetime.now(UTC)
            self.raise_(
                CartReconciled(
                    cart_id=str(self.id),
                    adjustments=json.dumps([a.to_dict() for a in adjustments]),
                )
            )
        return adjustments
