"""Ordering bounded context: Shopping Cart, Checkout and Orders.

Handles per-customer shopping carts, the checkout flow that reserves
inventory and converts a cart into an immutable order, and order status
progression after checkout.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
