"""Cart reconciliation: align cart lines with current stock."""

import structlog
from inventory.ledger import InventoryLedger
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain
from shared.errors import ProductNotFound

from ordering.cart.cart import ShoppingCart
from ordering.cart.management import find_cart
from ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.command(part_of="ShoppingCart")
class ReconcileCart:
    customer_id = Identifier(required=True)


def _available(ledger, product_id) -> int:
    try:
        return ledger.get_available(product_id)
    except ProductNotFound:
        return 0


@ordering.command_handler(part_of=ShoppingCart)
class ReconcileCartHandler:
    @handle(ReconcileCart)
    def reconcile_cart(self, command):
        """Returns the list of CartAdjustment made; empty when nothing changed."""
        cart = find_cart(command.customer_id)
        if cart is None or cart.is_empty:
            return []

        ledger = InventoryLedger()
        availability = {product_id: _available(ledger, product_id) for product_id, _ in cart.lines()}
        adjustments = cart.reconcile(availability)

        if adjustments:
            current_domain.repository_for(ShoppingCart).add(cart)
            logger.info(
                "Cart reconciled",
                customer_id=str(command.customer_id),
                adjustments=len(adjustments),
            )
        return adjustments
