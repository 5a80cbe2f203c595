"""Order lookups for the customer-facing API."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from shared.errors import OrderAccessDenied, OrderNotFound

from ordering.order.order import Order


def orders_for_customer(customer_id) -> list[Order]:
    """All orders placed by the customer, newest first."""
    repo = current_domain.repository_for(Order)
    orders = repo._dao.query.filter(customer_id=str(customer_id)).all().items
    return sorted(orders, key=lambda o: o.created_at, reverse=True)


def order_for_customer(order_id, customer_id) -> Order:
    """Fetch one order, refusing access to other customers' orders."""
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound(str(order_id)) from None

    if str(order.customer_id) != str(customer_id):
        raise OrderAccessDenied(str(order_id), str(customer_id))
    return order
