"""Configurable fake payment gateway for development and testing.

Simulates intent creation without any external calls. It can be told to
decline, or to raise as if the gateway were unreachable, so tests can drive
the checkout compensation paths.
"""

from decimal import Decimal
from uuid import uuid4

from payments.gateway.port import PaymentGateway, PaymentIntent


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.unreachable: bool = False
        self.calls: list[dict] = []
        self._intents: dict[str, PaymentIntent] = {}

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined", unreachable: bool = False) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.unreachable = unreachable

    def create_payment_intent(self, amount: Decimal, currency: str, idempotency_key: str) -> PaymentIntent:
        self.calls.append(
            {
                "method": "create_payment_intent",
                "amount": amount,
                "currency": currency,
                "idempotency_key": idempotency_key,
            }
        )

        if self.unreachable:
            raise ConnectionError("Payment gateway unreachable")

        if idempotency_key in self._intents:
            return self._intents[idempotency_key]

        if not self.should_succeed:
            return PaymentIntent(success=False, status="failed", failure_reason=self.failure_reason)

        intent_id = f"fake_pi_{uuid4().hex[:12]}"
        intent = PaymentIntent(
            success=True,
            intent_id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:8]}",
            status="requires_payment_method",
        )
        self._intents[idempotency_key] = intent
        return intent
