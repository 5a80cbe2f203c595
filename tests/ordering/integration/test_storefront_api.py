"""Integration tests for the cart, checkout and order endpoints via TestClient."""

import pytest
from catalogue.api import product_router
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api.errors import register_checkout_error_handlers
from ordering.api.routes import cart_router, order_router
from protean.integrations.fastapi import register_exception_handlers

ADDRESS = "1 Main St, Springfield"


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    register_checkout_error_handlers(app)
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    return TestClient(app)


def _create_product(client, product_id="prod-001", stock=5, price="19.99"):
    response = client.post(
        "/products",
        json={"product_id": product_id, "name": f"Product {product_id}", "unit_price": price, "stock_quantity": stock},
    )
    assert response.status_code == 201
    return response.json()


def _add_item(client, customer_id="cust-001", product_id="prod-001", quantity=1):
    return client.post(f"/carts/{customer_id}/items", json={"product_id": product_id, "quantity": quantity})


def _checkout(client, customer_id="cust-001"):
    return client.post(f"/carts/{customer_id}/checkout", json={"shipping_address": ADDRESS})


class TestCartEndpoints:
    def test_add_and_get_cart(self, client):
        _create_product(client)
        response = _add_item(client, quantity=2)
        assert response.status_code == 200
        assert response.json() == {"product_id": "prod-001", "quantity": 2}

        response = _add_item(client, quantity=1)
        assert response.json()["quantity"] == 3

        cart = client.get("/carts/cust-001").json()
        assert cart["items"] == [{"product_id": "prod-001", "quantity": 3}]

    def test_empty_cart_for_new_customer(self, client):
        response = client.get("/carts/cust-new")
        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_zero_quantity_rejected(self, client):
        _create_product(client)
        assert _add_item(client, quantity=0).status_code == 422

    def test_unknown_product(self, client):
        response = _add_item(client, product_id="prod-404")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "product_not_found"

    def test_add_above_stock(self, client):
        _create_product(client, stock=2)
        response = _add_item(client, quantity=3)
        assert response.status_code == 409
        assert response.json()["error"]["lines"] == [{"product_id": "prod-001", "requested": 3, "available": 2}]

    def test_update_and_remove(self, client):
        _create_product(client, "prod-001")
        _create_product(client, "prod-002")
        _add_item(client, product_id="prod-001")
        _add_item(client, product_id="prod-002")

        response = client.put("/carts/cust-001/items/prod-001", json={"quantity": 4})
        assert response.status_code == 200

        response = client.delete("/carts/cust-001/items/prod-002")
        assert response.status_code == 200
        assert client.get("/carts/cust-001").json()["items"] == [{"product_id": "prod-001", "quantity": 4}]

        response = client.delete("/carts/cust-001/items/prod-002")
        assert response.status_code == 404

    def test_remove_many_and_clear(self, client):
        for pid in ("prod-001", "prod-002", "prod-003"):
            _create_product(client, pid)
            _add_item(client, product_id=pid)

        response = client.post("/carts/cust-001/items/remove", json={"product_ids": ["prod-001", "prod-404"]})
        assert response.json() == {"removed": 1}

        response = client.delete("/carts/cust-001/items")
        assert response.json() == {"removed": 2}

    def test_summary(self, client):
        _create_product(client, price="0.10", stock=10)
        _add_item(client, quantity=3)

        summary = client.get("/carts/cust-001/summary").json()
        assert summary["total_amount"] == "0.30"
        assert summary["line_count"] == 1
        assert summary["lines"][0]["available_stock"] == 10

    def test_reconcile(self, client):
        _create_product(client, stock=5)
        _add_item(client, quantity=2)
        client.put("/products/prod-001/stock", json={"stock_quantity": 0})

        response = client.post("/carts/cust-001/reconcile")
        assert response.json()["adjustments"] == [
            {"product_id": "prod-001", "action": "removed", "previous_quantity": 2, "new_quantity": 0}
        ]
        assert client.post("/carts/cust-001/reconcile").json()["adjustments"] == []


class TestCheckoutEndpoint:
    def test_checkout_creates_order(self, client):
        _create_product(client, stock=5, price="19.99")
        _add_item(client, quantity=3)

        response = _checkout(client)
        assert response.status_code == 201
        body = response.json()
        assert body["total_amount"] == "59.97"
        assert body["payment_reference"].startswith("fake_pi_")

        assert client.get("/products/prod-001").json()["stock_quantity"] == 2
        assert client.get("/carts/cust-001").json()["items"] == []

    def test_confirmation_sent_after_response(self, client, email_channel):
        _create_product(client, stock=5)
        _add_item(client, quantity=1)

        response = _checkout(client)

        # TestClient runs background tasks before returning
        [email] = email_channel.sent_emails
        assert response.json()["order_number"] in email.subject

    def test_failed_confirmation_keeps_checkout_successful(self, client, email_channel):
        _create_product(client, stock=5)
        _add_item(client, quantity=1)
        email_channel.configure(should_succeed=False)

        response = _checkout(client)
        assert response.status_code == 201
        assert client.get("/products/prod-001").json()["stock_quantity"] == 4

    def test_empty_cart(self, client):
        response = _checkout(client)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "empty_cart"

    def test_insufficient_stock(self, client):
        _create_product(client, stock=5)
        _add_item(client, quantity=3)
        client.put("/products/prod-001/stock", json={"stock_quantity": 2})

        response = _checkout(client)
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "insufficient_stock"
        assert response.json()["error"]["lines"] == [{"product_id": "prod-001", "requested": 3, "available": 2}]
        assert client.get("/products/prod-001").json()["stock_quantity"] == 2

    def test_declined_payment_is_retryable(self, client, gateway):
        _create_product(client, stock=5)
        _add_item(client, quantity=1)
        gateway.configure(should_succeed=False)

        response = _checkout(client)
        assert response.status_code == 503
        assert response.headers["retry-after"] == "1"
        assert client.get("/products/prod-001").json()["stock_quantity"] == 5

    def test_missing_shipping_address(self, client):
        _create_product(client)
        _add_item(client)
        response = client.post("/carts/cust-001/checkout", json={"shipping_address": ""})
        assert response.status_code == 422


class TestOrderEndpoints:
    def test_list_and_get_orders(self, client):
        _create_product(client)
        _add_item(client)
        order_id = _checkout(client).json()["order_id"]

        orders = client.get("/orders", params={"customer_id": "cust-001"}).json()
        assert [o["order_id"] for o in orders] == [order_id]
        assert orders[0]["status"] == "Pending"

        order = client.get(f"/orders/{order_id}", params={"customer_id": "cust-001"}).json()
        assert order["items"][0]["unit_price"] == "19.99"

    def test_other_customer_forbidden(self, client):
        _create_product(client)
        _add_item(client)
        order_id = _checkout(client).json()["order_id"]

        response = client.get(f"/orders/{order_id}", params={"customer_id": "cust-002"})
        assert response.status_code == 403

    def test_unknown_order(self, client):
        response = client.get("/orders/ord-404", params={"customer_id": "cust-001"})
        assert response.status_code == 404

    def test_update_status(self, client):
        _create_product(client)
        _add_item(client)
        order_id = _checkout(client).json()["order_id"]

        response = client.put(f"/orders/{order_id}/status", json={"status": "Processing"})
        assert response.status_code == 200
        assert response.json() == {"order_id": order_id, "status": "Processing"}

        response = client.put(f"/orders/{order_id}/status", json={"status": "Pending"})
        assert response.status_code == 400
