"""Checkout coordinator: turns a customer's cart into a pending order.

The only multi-step operation in the system. Phases:

    VALIDATING → RESERVING → COMMITTING → COMMITTED
    REJECTED         (nothing was changed)
    PARTIALLY_FAILED (a compensating release failed; see the error log)

Validating is read-only and reports every line that cannot be satisfied.
Reserving takes stock line by line in ascending product-id order, so two
checkouts sharing products always contend in the same order. Any failure
after the first reservation releases everything taken in this attempt
before the error propagates. Stock is never held across requests.

Once committed, the order confirmation is handed to ``dispatch`` (a shared
background pool by default, FastAPI's BackgroundTasks from the API), so a
slow or failing email channel never holds up the checkout.
"""

import json
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

import structlog
from inventory.ledger import InventoryLedger
from notifications.notifier import OrderNotifier, PlacedOrder
from payments.gateway.port import PaymentGateway
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from shared.errors import (
    CheckoutError,
    EmptyCart,
    InsufficientStock,
    PaymentFailure,
    PersistenceFailure,
    ProductNotFound,
    StockShortfall,
)

from ordering.cart.items import ClearCart
from ordering.cart.management import find_cart
from ordering.order.creation import PlaceOrder
from ordering.order.order import generate_order_number

logger = structlog.get_logger(__name__)

_notification_pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="order-notifications")


def send_in_background(job: Callable, *args) -> Future:
    """Run a post-commit job on the shared notification pool."""
    return _notification_pool.submit(job, *args)


class CheckoutPhase(Enum):
    VALIDATING = "Validating"
    RESERVING = "Reserving"
    COMMITTING = "Committing"
    COMMITTED = "Committed"
    REJECTED = "Rejected"
    PARTIALLY_FAILED = "PartiallyFailed"


@dataclass(frozen=True)
class CheckoutResult:
    order_id: str
    order_number: str
    total_amount: Decimal
    currency: str = "USD"
    payment_reference: str | None = None


@dataclass(frozen=True)
class PricedLine:
    """A cart line with the price and name read during validation."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
        }


class CheckoutCoordinator:
    def __init__(
        self,
        ledger: InventoryLedger | None = None,
        notifier: OrderNotifier | None = None,
        gateway: PaymentGateway | None = None,
        dispatch: Callable[..., None] | None = None,
    ):
        self.ledger = ledger or InventoryLedger()
        self.notifier = notifier or OrderNotifier()
        self.gateway = gateway
        self.dispatch = dispatch or send_in_background
        self.phases: list[CheckoutPhase] = []

    @property
    def phase(self) -> CheckoutPhase | None:
        return self.phases[-1] if self.phases else None

    def _enter(self, phase: CheckoutPhase):
        self.phases.append(phase)
        logger.debug("Checkout phase", phase=phase.value)

    # -------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------
    def checkout(self, customer_id, shipping_address, currency="USD") -> CheckoutResult:
        """Convert the customer's cart into a pending order.

        Raises:
            EmptyCart: the cart has no lines.
            InsufficientStock: one or more lines exceed current stock.
            PaymentFailure: the payment intent could not be created.
            PersistenceFailure: a store failed; no stock is left reserved
                unless ``unreleased`` is populated.
        """
        self.phases = []
        customer_id = str(customer_id)
        lines = self._validate(customer_id, shipping_address)
        self._reserve(lines)
        result = self._commit(customer_id, lines, shipping_address, currency)
        self._enter(CheckoutPhase.COMMITTED)

        logger.info(
            "Order placed",
            customer_id=customer_id,
            order_id=result.order_id,
            order_number=result.order_number,
            total_amount=str(result.total_amount),
        )
        self.dispatch(self._notify, customer_id, result, lines)
        return result

    # -------------------------------------------------------------------
    # Validating
    # -------------------------------------------------------------------
    def _validate(self, customer_id, shipping_address) -> list[PricedLine]:
        self._enter(CheckoutPhase.VALIDATING)
        if not shipping_address or not str(shipping_address).strip():
            self._enter(CheckoutPhase.REJECTED)
            raise ValidationError({"shipping_address": ["Shipping address is required"]})

        try:
            cart = find_cart(customer_id)
            if cart is None or cart.is_empty:
                raise EmptyCart(customer_id)

            priced, shortfalls = [], []
            for product_id, quantity in cart.lines():
                try:
                    product = self.ledger.snapshot(product_id)
                except ProductNotFound:
                    shortfalls.append(StockShortfall(product_id, quantity, 0))
                    continue

                if quantity > product.stock_quantity:
                    shortfalls.append(StockShortfall(product_id, quantity, product.stock_quantity))
                priced.append(PricedLine(product_id, product.name, quantity, product.unit_price))

            if shortfalls:
                raise InsufficientStock(shortfalls)
        except CheckoutError as exc:
            self._enter(CheckoutPhase.REJECTED)
            logger.info("Checkout rejected", customer_id=customer_id, code=exc.code)
            raise
        except Exception as exc:
            self._enter(CheckoutPhase.REJECTED)
            raise PersistenceFailure(f"Cart could not be read: {exc}") from exc
        return priced

    # -------------------------------------------------------------------
    # Reserving
    # -------------------------------------------------------------------
    def _reserve(self, lines: list[PricedLine]) -> None:
        self._enter(CheckoutPhase.RESERVING)
        reserved: list[PricedLine] = []
        for line in sorted(lines, key=lambda line: line.product_id):
            try:
                ok = self.ledger.try_reserve(line.product_id, line.quantity)
            except ProductNotFound:
                ok = False
            except Exception as exc:
                self._release(reserved)
                self._enter(CheckoutPhase.REJECTED)
                if isinstance(exc, PersistenceFailure):
                    raise
                raise PersistenceFailure(f"Stock reservation failed: {exc}") from exc

            if not ok:
                self._release(reserved)
                self._enter(CheckoutPhase.REJECTED)
                raise InsufficientStock(self._shortfalls_after_race(line, lines))
            reserved.append(line)

    def _shortfalls_after_race(self, lost: PricedLine, lines: list[PricedLine]) -> list[StockShortfall]:
        """Lines that cannot be satisfied now, always including the one that lost."""
        shortfalls = []
        for line in lines:
            try:
                available = self.ledger.get_available(line.product_id)
            except ProductNotFound:
                available = 0
            if line is lost or line.quantity > available:
                shortfalls.append(StockShortfall(line.product_id, line.quantity, available))
        return shortfalls

    def _release(self, reserved: list[PricedLine]) -> None:
        """Return every reservation taken in this attempt.

        Raises PersistenceFailure listing the lines that could not be
        returned, after attempting all of them.
        """
        unreleased = []
        for line in reserved:
            try:
                self.ledger.release(line.product_id, line.quantity)
            except Exception as exc:
                logger.error(
                    "Reservation could not be released",
                    product_id=line.product_id,
                    quantity=line.quantity,
                    error=str(exc),
                )
                unreleased.append((line.product_id, line.quantity))

        if reserved:
            logger.warning("Reservations released", lines=len(reserved) - len(unreleased))

        if unreleased:
            self._enter(CheckoutPhase.PARTIALLY_FAILED)
            raise PersistenceFailure(
                "Checkout failed and some reserved stock could not be returned",
                unreleased=unreleased,
            )

    # -------------------------------------------------------------------
    # Committing
    # -------------------------------------------------------------------
    def _commit(self, customer_id, lines, shipping_address, currency) -> CheckoutResult:
        self._enter(CheckoutPhase.COMMITTING)
        total = sum((line.line_total for line in lines), Decimal("0"))
        order_number = generate_order_number()
        payment_reference = self._create_payment_intent(lines, total, currency, order_number)

        try:
            order_id = current_domain.process(
                PlaceOrder(
                    order_number=order_number,
                    customer_id=customer_id,
                    items=json.dumps([line.to_dict() for line in lines]),
                    shipping_address=shipping_address,
                    currency=currency,
                    payment_reference=payment_reference,
                ),
                asynchronous=False,
            )
        except Exception as exc:
            logger.error("Order could not be saved", customer_id=customer_id, error=str(exc))
            self._release(lines)
            self._enter(CheckoutPhase.REJECTED)
            raise PersistenceFailure(f"Order could not be saved: {exc}") from exc

        try:
            current_domain.process(ClearCart(customer_id=customer_id), asynchronous=False)
        except Exception as exc:
            # The order stands
            logger.error("Cart not cleared after order was placed", customer_id=customer_id, error=str(exc))

        return CheckoutResult(
            order_id=str(order_id),
            order_number=order_number,
            total_amount=total,
            currency=currency,
            payment_reference=payment_reference,
        )

    def _create_payment_intent(self, lines, total, currency, order_number) -> str | None:
        if self.gateway is None:
            return None

        try:
            intent = self.gateway.create_payment_intent(amount=total, currency=currency, idempotency_key=order_number)
        except Exception as exc:
            logger.error("Payment gateway error", order_number=order_number, error=str(exc))
            self._release(lines)
            self._enter(CheckoutPhase.REJECTED)
            raise PaymentFailure(f"Payment could not be initiated: {exc}") from exc

        if not intent.success:
            logger.warning("Payment intent declined", order_number=order_number, reason=intent.failure_reason)
            self._release(lines)
            self._enter(CheckoutPhase.REJECTED)
            raise PaymentFailure(f"Payment could not be initiated: {intent.failure_reason}")
        return intent.intent_id

    # -------------------------------------------------------------------
    # Committed
    # -------------------------------------------------------------------
    def _notify(self, customer_id, result: CheckoutResult, lines: list[PricedLine]) -> None:
        try:
            self.notifier.notify_order_created(
                PlacedOrder(
                    order_id=result.order_id,
                    order_number=result.order_number,
                    customer_id=customer_id,
                    total_amount=result.total_amount,
                    currency=result.currency,
                    lines=[line.to_dict() for line in lines],
                )
            )
        except Exception as exc:
            logger.error(
                "Order confirmation failed",
                order_number=result.order_number,
                error=str(exc),
            )
