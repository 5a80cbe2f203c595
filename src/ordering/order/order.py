"""Order aggregate (CQRS): the immutable record produced by checkout.

Line items and prices are captured when the order is placed and never
re-read from the catalogue. Only the status moves afterwards:

    PENDING → PROCESSING → SHIPPED → DELIVERED
    CANCELLED (from PENDING, PROCESSING, SHIPPED)

Money is held as canonical decimal strings and handled as ``Decimal``.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from ordering.domain import ordering
from ordering.order.events import OrderPlaced, OrderStatusChanged


class OrderStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def generate_order_number(now=None) -> str:
    """Human-readable order number: UTC timestamp plus six hex characters."""
    now = now or datetime.now(UTC)
    return f"{now:%Y%m%d%H%M%S}-{uuid4().hex[:6].upper()}"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A product line with the price that was current at checkout."""

    product_id = Identifier(required=True)
    product_name = String(max_length=100)
    quantity = Integer(required=True, min_value=1)
    unit_price = String(required=True, max_length=32)

    @property
    def price(self) -> Decimal:
        return Decimal(self.unit_price)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=32, unique=True)
    customer_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = HasMany(OrderItem)
    total_amount = String(required=True, max_length=32)
    currency = String(max_length=3, default="USD")
    shipping_address = Text(required=True)
    payment_reference = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_match_line_items(self):
        if not self.items or self.total_amount is None:
            return
        expected = sum((item.line_total for item in self.items), Decimal("0"))
        if Decimal(self.total_amount) != expected:
            raise ValidationError(
                {"total_amount": [f"Total {self.total_amount} does not match line items ({expected})"]}
            )

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_id,
        lines,
        shipping_address,
        currency="USD",
        payment_reference=None,
    ):
        """Create a pending order from checked-out lines.

        Args:
            order_number: Human-readable number, see ``generate_order_number``.
            customer_id: The customer placing the order.
            lines: List of dicts with product_id, product_name, quantity and
                   unit_price (Decimal or decimal string).
            shipping_address: Free-form delivery address.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one line"]})

        items = [
            OrderItem(
                product_id=str(line["product_id"]),
                product_name=line.get("product_name"),
                quantity=line["quantity"],
                unit_price=str(Decimal(str(line["unit_price"]))),
            )
            for line in lines
        ]
        total = sum((item.line_total for item in items), Decimal("0"))
        now = datetime.now(UTC)

        order = cls(
            order_number=order_number,
            customer_id=str(customer_id),
            status=OrderStatus.PENDING.value,
            items=items,
            total_amount=str(total),
            currency=currency,
            shipping_address=shipping_address,
            payment_reference=payment_reference,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                customer_id=str(order.customer_id),
                items=json.dumps(order.line_items()),
                item_count=len(items),
                total_amount=order.total_amount,
                currency=order.currency,
                payment_reference=payment_reference,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def total(self) -> Decimal:
        return Decimal(self.total_amount)

    def line_items(self) -> list[dict]:
        return [
            {
                "product_id": str(item.product_id),
                "product_name": item.product_name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
            }
            for item in sorted(self.items, key=lambda i: str(i.product_id))
        ]

    # -------------------------------------------------------------------
    # Status progression
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def advance_status(self, new_status):
        """Move the order to ``new_status`` (an OrderStatus or its value)."""
        try:
            target = OrderStatus(new_status.value if isinstance(new_status, OrderStatus) else new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {new_status}"]}) from None

        self._assert_can_transition(target)
        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )
