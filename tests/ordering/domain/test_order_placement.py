"""Tests for the Order aggregate: placement, totals and status progression."""

import re
from datetime import UTC, datetime
from decimal import Decimal

import pytest
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.order.order import Order, OrderItem, OrderStatus, generate_order_number
from protean.exceptions import ValidationError


def _place(lines=None, **overrides):
    defaults = {
        "order_number": generate_order_number(),
        "customer_id": "cust-001",
        "lines": lines
        or [
            {"product_id": "prod-001", "product_name": "Mug", "quantity": 3, "unit_price": Decimal("0.10")},
            {"product_id": "prod-002", "product_name": "Kettle", "quantity": 1, "unit_price": "54.50"},
        ],
        "shipping_address": "1 Main St, Springfield",
    }
    defaults.update(overrides)
    return Order.place(**defaults)


class TestOrderNumber:
    def test_format(self):
        number = generate_order_number(datetime(2024, 3, 9, 14, 5, 7, tzinfo=UTC))
        assert re.fullmatch(r"20240309140507-[0-9A-F]{6}", number)

    def test_numbers_differ(self):
        assert len({generate_order_number() for _ in range(50)}) == 50


class TestPlaceOrder:
    def test_order_is_pending(self):
        order = _place()
        assert order.status == OrderStatus.PENDING.value
        assert order.customer_id == "cust-001"
        assert len(order.items) == 2

    def test_total_is_exact_decimal_sum(self):
        order = _place()
        # 3 × 0.10 must be exactly 0.30, not 0.30000000000000004
        assert order.total == Decimal("54.80")
        assert order.total_amount == "54.80"

    def test_prices_are_captured_as_strings(self):
        order = _place()
        items = {item.product_id: item for item in order.items}
        assert items["prod-001"].unit_price == "0.10"
        assert items["prod-001"].line_total == Decimal("0.30")

    def test_raises_order_placed(self):
        order = _place(payment_reference="pi_123")
        event = next(e for e in order._events if isinstance(e, OrderPlaced))
        assert event.order_id == str(order.id)
        assert event.total_amount == "54.80"
        assert event.item_count == 2
        assert event.payment_reference == "pi_123"

    def test_needs_at_least_one_line(self):
        with pytest.raises(ValidationError):
            Order.place(
                order_number=generate_order_number(),
                customer_id="cust-001",
                lines=[],
                shipping_address="1 Main St",
            )

    def test_line_items_sorted_by_product(self):
        order = _place()
        assert [line["product_id"] for line in order.line_items()] == ["prod-001", "prod-002"]


class TestTotalInvariant:
    def test_mismatched_total_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Order(
                order_number=generate_order_number(),
                customer_id="cust-001",
                items=[OrderItem(product_id="prod-001", quantity=2, unit_price="5.00")],
                total_amount="9.99",
                shipping_address="1 Main St",
            )
        assert "total_amount" in exc_info.value.messages


class TestStatusProgression:
    def test_happy_path(self):
        order = _place()
        order.advance_status(OrderStatus.PROCESSING)
        order.advance_status("Shipped")
        order.advance_status(OrderStatus.DELIVERED)
        assert order.status == OrderStatus.DELIVERED.value

        changes = [e for e in order._events if isinstance(e, OrderStatusChanged)]
        assert [(c.previous_status, c.new_status) for c in changes] == [
            ("Pending", "Processing"),
            ("Processing", "Shipped"),
            ("Shipped", "Delivered"),
        ]

    @pytest.mark.parametrize("path", [[], ["Processing"], ["Processing", "Shipped"]])
    def test_cancel_from_non_terminal_states(self, path):
        order = _place()
        for status in path:
            order.advance_status(status)
        order.advance_status(OrderStatus.CANCELLED)
        assert order.status == OrderStatus.CANCELLED.value

    def test_cannot_skip_states(self):
        order = _place()
        with pytest.raises(ValidationError):
            order.advance_status(OrderStatus.SHIPPED)

    def test_terminal_states_are_final(self):
        order = _place()
        order.advance_status(OrderStatus.CANCELLED)
        with pytest.raises(ValidationError):
            order.advance_status(OrderStatus.PROCESSING)

    def test_unknown_status(self):
        order = _place()
        with pytest.raises(ValidationError):
            order.advance_status("Teleported")
