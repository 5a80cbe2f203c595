"""Stripe payment gateway adapter (production stub).

This is a placeholder for the real Stripe SDK integration. In production
it would call ``stripe.PaymentIntent.create`` with the amount converted to
minor units and the order number as the idempotency key.
"""

from decimal import Decimal

from payments.gateway.port import PaymentClientConfig, PaymentGateway, PaymentIntent


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter. Not yet implemented."""

    def __init__(self, config: PaymentClientConfig) -> None:
        self.config = config

    def create_payment_intent(self, amount: Decimal, currency: str, idempotency_key: str) -> PaymentIntent:
        raise NotImplementedError(
            "StripeGateway.create_payment_intent() is not yet implemented. Integrate stripe-python SDK here."
        )
