"""Cart lookup: one cart per customer, created on first write."""

from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart


def find_cart(customer_id) -> ShoppingCart | None:
    """Return the customer's cart, or None if they never had one."""
    repo = current_domain.repository_for(ShoppingCart)
    carts = repo._dao.query.filter(customer_id=str(customer_id)).all().items
    if not carts:
        return None
    oldest = min(carts, key=lambda c: c.created_at)
    return repo.get(oldest.id)


def get_or_create_cart(customer_id) -> ShoppingCart:
    """Return the customer's cart, building an unsaved one if none exists.

    The new cart is persisted by whichever handler first adds it to the
    repository, so reads never create empty carts.
    """
    return find_cart(customer_id) or ShoppingCart.create(customer_id=str(customer_id))
