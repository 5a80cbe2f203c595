"""Error taxonomy shared by the catalogue, inventory and ordering contexts.

Every error carries a stable ``code`` and renders to a dict through
``to_dict()`` so the API layer can surface it without knowing its shape.
"""

from dataclasses import asdict, dataclass


class CheckoutError(Exception):
    """Base exception for cart, inventory and checkout errors."""

    code = "checkout_error"
    retryable = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


# ---------------------------------------------------------------------------
# NotFound
# ---------------------------------------------------------------------------
class ProductNotFound(CheckoutError):
    code = "product_not_found"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "product_id": self.product_id}


class CartLineNotFound(CheckoutError):
    code = "cart_line_not_found"

    def __init__(self, customer_id: str, product_id: str):
        self.customer_id = customer_id
        self.product_id = product_id
        super().__init__(f"Item not found in cart: {product_id}")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "product_id": self.product_id}


class OrderNotFound(CheckoutError):
    code = "order_not_found"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class OrderAccessDenied(CheckoutError):
    code = "order_access_denied"

    def __init__(self, order_id: str, customer_id: str):
        self.order_id = order_id
        self.customer_id = customer_id
        super().__init__(f"Order {order_id} does not belong to customer {customer_id}")


# ---------------------------------------------------------------------------
# InsufficientStock
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class StockShortfall:
    """A cart line that cannot be satisfied from current stock."""

    product_id: str
    requested: int
    available: int

    def to_dict(self) -> dict:
        return asdict(self)


class InsufficientStock(CheckoutError):
    """One or more lines exceed available stock.

    Carries every offending line so the caller can resolve all conflicts in
    a single round trip.
    """

    code = "insufficient_stock"

    def __init__(self, lines: list[StockShortfall]):
        self.lines = sorted(lines, key=lambda line: line.product_id)
        summary = ", ".join(
            f"{line.product_id} (requested {line.requested}, available {line.available})" for line in self.lines
        )
        super().__init__(f"Not enough stock available: {summary}")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "lines": [line.to_dict() for line in self.lines]}


# ---------------------------------------------------------------------------
# EmptyCart
# ---------------------------------------------------------------------------
class EmptyCart(CheckoutError):
    code = "empty_cart"

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__("Cart is empty")


# ---------------------------------------------------------------------------
# Transient failures
# ---------------------------------------------------------------------------
class PersistenceFailure(CheckoutError):
    """A store was unavailable or errored. Safe to retry the whole checkout.

    ``unreleased`` lists ``(product_id, quantity)`` pairs whose compensation
    could not be applied; it is empty whenever rollback completed.
    """

    code = "persistence_failure"
    retryable = True

    def __init__(self, message: str, unreleased: list[tuple[str, int]] | None = None):
        self.unreleased = list(unreleased or [])
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.unreleased:
            data["unreleased"] = [{"product_id": pid, "quantity": qty} for pid, qty in self.unreleased]
        return data


class PaymentFailure(CheckoutError):
    code = "payment_failure"
    retryable = True


class NotificationFailure(CheckoutError):
    """Order confirmation could not be delivered. Logged, never surfaced."""

    code = "notification_failure"
