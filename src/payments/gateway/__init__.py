"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing (PAYMENT_GATEWAY=fake, default)
- StripeGateway for production (PAYMENT_GATEWAY=stripe, stub), configured
  from STRIPE_SECRET_KEY and PAYMENT_CURRENCY
"""

import os

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import PaymentClientConfig, PaymentGateway

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to FakeGateway."""
    global _current_gateway
    if _current_gateway is None:
        kind = os.environ.get("PAYMENT_GATEWAY", "fake")
        if kind == "fake":
            _current_gateway = FakeGateway()
        elif kind == "stripe":
            from payments.gateway.stripe_adapter import StripeGateway

            config = PaymentClientConfig(
                api_key=os.environ.get("STRIPE_SECRET_KEY", ""),
                currency=os.environ.get("PAYMENT_CURRENCY", "USD"),
            )
            _current_gateway = StripeGateway(config)
        else:
            raise ValueError(f"Unknown payment gateway: {kind}")
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
