"""Cart item management: commands and handler.

Stock checks made here are advisory: they keep obviously unfulfillable
lines out of the cart, but stock can still change before checkout, which
re-validates everything.
"""

import json

from inventory.ledger import InventoryLedger
from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain
from shared.errors import InsufficientStock, StockShortfall

from ordering.cart.cart import ShoppingCart
from ordering.cart.management import find_cart, get_or_create_cart
from ordering.domain import ordering


@ordering.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.command(part_of="ShoppingCart")
class RemoveManyFromCart:
    customer_id = Identifier(required=True)
    product_ids = Text(required=True)  # JSON array of product ids


@ordering.command(part_of="ShoppingCart")
class ClearCart:
    customer_id = Identifier(required=True)


def _check_stock(product_id, requested):
    available = InventoryLedger().get_available(product_id)
    if requested > available:
        raise InsufficientStock([StockShortfall(str(product_id), requested, available)])


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        cart = get_or_create_cart(command.customer_id)
        _check_stock(command.product_id, cart.quantity_of(command.product_id) + command.quantity)

        line_quantity = cart.add_item(product_id=command.product_id, quantity=command.quantity)
        current_domain.repository_for(ShoppingCart).add(cart)
        return line_quantity

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        cart = get_or_create_cart(command.customer_id)
        # Raises CartLineNotFound before touching the catalogue
        cart.update_item_quantity(product_id=command.product_id, new_quantity=command.quantity)
        _check_stock(command.product_id, command.quantity)
        current_domain.repository_for(ShoppingCart).add(cart)
        return command.quantity

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = get_or_create_cart(command.customer_id)
        cart.remove_item(product_id=command.product_id)
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(RemoveManyFromCart)
    def remove_many_from_cart(self, command):
        product_ids = (
            json.loads(command.product_ids) if isinstance(command.product_ids, str) else command.product_ids
        )
        cart = find_cart(command.customer_id)
        if cart is None:
            return 0

        removed = cart.remove_products(product_ids)
        if removed:
            current_domain.repository_for(ShoppingCart).add(cart)
        return removed

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = find_cart(command.customer_id)
        if cart is None or cart.is_empty:
            return 0

        lines_removed = cart.empty()
        current_domain.repository_for(ShoppingCart).add(cart)
        return lines_removed
