"""Cart summary: lines priced against the current catalogue.

Nothing here is persisted; every call re-reads price and stock so the
summary reflects the catalogue at the moment it is requested.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from inventory.ledger import InventoryLedger
from shared.errors import ProductNotFound

from ordering.cart.management import find_cart


@dataclass(frozen=True)
class CartLineView:
    product_id: str
    quantity: int
    name: str | None
    unit_price: Decimal | None
    line_total: Decimal
    available_stock: int

    @property
    def is_available(self) -> bool:
        return self.unit_price is not None and self.available_stock >= self.quantity


@dataclass(frozen=True)
class CartSummary:
    customer_id: str
    line_count: int = 0
    total_quantity: int = 0
    total_amount: Decimal = Decimal("0")
    has_unavailable_items: bool = False
    lines: list[CartLineView] = field(default_factory=list)


def _line_view(ledger, product_id, quantity) -> CartLineView:
    try:
        product = ledger.snapshot(product_id)
    except ProductNotFound:
        return CartLineView(product_id, quantity, None, None, Decimal("0"), 0)

    return CartLineView(
        product_id=product_id,
        quantity=quantity,
        name=product.name,
        unit_price=product.unit_price,
        line_total=product.unit_price * quantity,
        available_stock=product.stock_quantity,
    )


def summarize_cart(customer_id, ledger: InventoryLedger | None = None) -> CartSummary:
    """Price every line of the customer's cart and flag unavailable ones.

    Lines whose product no longer exists are kept, priced at zero and
    reported as unavailable.
    """
    ledger = ledger or InventoryLedger()
    cart = find_cart(customer_id)
    if cart is None:
        return CartSummary(customer_id=str(customer_id))

    lines = [_line_view(ledger, product_id, quantity) for product_id, quantity in cart.lines()]
    return CartSummary(
        customer_id=str(customer_id),
        line_count=len(lines),
        total_quantity=sum(line.quantity for line in lines),
        total_amount=sum((line.line_total for line in lines), Decimal("0")),
        has_unavailable_items=any(not line.is_available for line in lines),
        lines=lines,
    )
