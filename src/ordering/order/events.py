"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out and converted into a pending order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=32)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON array of {product_id, product_name, quantity, unit_price}
    item_count = Integer(required=True)
    total_amount = String(required=True, max_length=32)
    currency = String(max_length=3, default="USD")
    payment_reference = String(max_length=255)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a new fulfilment status."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=32)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    changed_at = DateTime(required=True)
