"""Order notifier: tells the customer their order was placed.

Sending is best effort. ``notify_order_created`` raises NotificationFailure
when the channel refuses the message; callers on the checkout path catch
and log it so a lost email never fails an order.
"""

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal

import structlog
from shared.errors import NotificationFailure

from notifications.channel import get_email_channel
from notifications.channel.email_port import EmailMessage, EmailPort
from notifications.templates.order_confirmation import OrderConfirmationTemplate

logger = structlog.get_logger(__name__)

DEFAULT_FROM_ADDRESS = "orders@storefront.local"


@dataclass(frozen=True)
class PlacedOrder:
    """What the notifier needs to know about a freshly placed order."""

    order_id: str
    order_number: str
    customer_id: str
    total_amount: Decimal
    currency: str = "USD"
    lines: list[dict] = field(default_factory=list)


def customer_email(customer_id) -> str:
    return f"{customer_id}@customers.local"


class OrderNotifier:
    def __init__(
        self,
        channel: EmailPort | None = None,
        sender: str | None = None,
        resolve_email: Callable[[str], str] = customer_email,
    ):
        self._channel = channel
        self.sender = sender or os.environ.get("NOTIFICATION_FROM_ADDRESS", DEFAULT_FROM_ADDRESS)
        self.resolve_email = resolve_email

    @property
    def channel(self) -> EmailPort:
        return self._channel if self._channel is not None else get_email_channel()

    def notify_order_created(self, order: PlacedOrder) -> str:
        """Send the order confirmation. Returns the channel's message id."""
        content = OrderConfirmationTemplate.render(
            {
                "order_number": order.order_number,
                "total_amount": str(order.total_amount),
                "currency": order.currency,
                "lines": order.lines,
            }
        )
        recipient = self.resolve_email(order.customer_id)
        receipt = self.channel.send(
            EmailMessage(
                sender=self.sender,
                to=recipient,
                subject=content["subject"],
                body=content["body"],
            )
        )
        if not receipt.delivered:
            raise NotificationFailure(f"Order confirmation for {order.order_number} not sent: {receipt.error}")

        logger.info(
            "Order confirmation sent",
            order_number=order.order_number,
            recipient=recipient,
            message_id=receipt.message_id,
        )
        return receipt.message_id
