"""Payment gateway port (abstract interface).

The checkout flow asks the gateway for a payment intent covering the order
total before the order is written, and stores the intent id on the order
as its payment reference. Adapters: FakeGateway (dev/test) and
StripeGateway (production stub).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PaymentClientConfig:
    """Credentials and defaults for a gateway client, passed in explicitly."""

    api_key: str
    currency: str = "USD"

    def __post_init__(self):
        if not self.api_key:
            raise ValueError("A payment gateway api_key is required")


@dataclass(frozen=True)
class PaymentIntent:
    """Result of asking the gateway to create a payment intent."""

    success: bool
    intent_id: str | None = None
    client_secret: str | None = None
    status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment_intent(
        self,
        amount: Decimal,
        currency: str,
        idempotency_key: str,
    ) -> PaymentIntent:
        """Create a payment intent for ``amount`` in ``currency``.

        ``idempotency_key`` is the order number, so retrying the same
        checkout attempt never creates a second intent.
        """
        ...
