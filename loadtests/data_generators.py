"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that match the field names expected by
the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()


def customer_id() -> str:
    """Generate unique customer ids like 'cust-lt-a1b2c3d4'."""
    return f"cust-lt-{uuid.uuid4().hex[:8]}"


def product_data(product_id: str | None = None, stock_quantity: int | None = None) -> dict:
    """Generate a CreateProductRequest payload."""
    return {
        "product_id": product_id or f"prod-lt-{uuid.uuid4().hex[:8]}",
        "name": fake.catch_phrase()[:100],
        "unit_price": f"{random.randint(100, 20000) / 100:.2f}",
        "stock_quantity": stock_quantity if stock_quantity is not None else random.randint(50, 500),
        "category": random.choice(["Electronics", "Books", "Kitchen", "Garden"]),
    }


def cart_item_data(product_id: str, max_quantity: int = 3) -> dict:
    """Generate an AddToCartRequest payload."""
    return {"product_id": product_id, "quantity": random.randint(1, max_quantity)}


def checkout_data() -> dict:
    """Generate a CheckoutRequest payload with a one-line shipping address."""
    address = fake.address().replace("\n", ", ")
    return {"shipping_address": address[:500], "currency": "USD"}
