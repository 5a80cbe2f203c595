"""Order placement: command and handler.

Only the checkout coordinator sends ``PlaceOrder``: by the time it arrives
the stock for every line has already been reserved. Order numbers are
unique; a clash is refused so the coordinator can release stock and the
caller can retry with a fresh number.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class PlaceOrder:
    order_number = String(required=True, max_length=32)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, product_name, quantity, unit_price}
    shipping_address = Text(required=True)
    currency = String(max_length=3, default="USD")
    payment_reference = String(max_length=255)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        lines = json.loads(command.items) if isinstance(command.items, str) else command.items

        repo = current_domain.repository_for(Order)
        if repo._dao.query.filter(order_number=command.order_number).all().items:
            raise ValidationError({"order_number": [f"Order number {command.order_number} is already taken"]})

        order = Order.place(
            order_number=command.order_number,
            customer_id=command.customer_id,
            lines=lines,
            shipping_address=command.shipping_address,
            currency=command.currency or "USD",
            payment_reference=command.payment_reference,
        )
        repo.add(order)
        return str(order.id)
