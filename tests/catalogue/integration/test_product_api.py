"""Integration tests for the product management endpoints via TestClient."""

import pytest
from catalogue.api import product_router
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api.errors import register_checkout_error_handlers
from protean.integrations.fastapi import register_exception_handlers
from shared.errors import ProductNotFound


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    register_checkout_error_handlers(app)
    app.include_router(product_router)
    return TestClient(app)


def _create(client, product_id="prod-001", **overrides):
    body = {"product_id": product_id, "name": "Mug", "unit_price": "12.00", "stock_quantity": 5}
    body.update(overrides)
    return client.post("/products", json=body)


class TestProductEndpoints:
    def test_create_and_get(self, client):
        response = _create(client, category="Kitchen")
        assert response.status_code == 201
        assert response.json() == {
            "product_id": "prod-001",
            "name": "Mug",
            "unit_price": "12.00",
            "stock_quantity": 5,
            "category": "Kitchen",
            "is_available": True,
        }
        assert client.get("/products/prod-001").json()["name"] == "Mug"

    def test_list(self, client):
        _create(client, "prod-002")
        _create(client, "prod-001")
        assert [p["product_id"] for p in client.get("/products").json()] == ["prod-001", "prod-002"]

    def test_duplicate(self, client):
        _create(client)
        assert _create(client).status_code == 400

    def test_negative_stock(self, client):
        assert _create(client, stock_quantity=-1).status_code == 422

    def test_unknown(self, client):
        response = client.get("/products/prod-404")
        assert response.status_code == 404
        assert response.json()["error"]["product_id"] == "prod-404"

    def test_restock_and_reprice(self, client):
        _create(client)
        assert client.put("/products/prod-001/stock", json={"stock_quantity": 0}).json()["is_available"] is False
        assert client.put("/products/prod-001/price", json={"unit_price": "9.99"}).json()["unit_price"] == "9.99"


class TestProductionGuard:
    def test_management_refused_in_production(self, client, catalog, monkeypatch):
        catalog.add_product("prod-001", "Mug", "12.00", 5)
        monkeypatch.setenv("PROTEAN_ENV", "production")

        assert _create(client, product_id="prod-002").status_code == 403
        assert client.put("/products/prod-001/stock", json={"stock_quantity": 500}).status_code == 403
        assert client.put("/products/prod-001/price", json={"unit_price": "0.01"}).status_code == 403

        product = catalog.get_product("prod-001")
        assert (product.stock_quantity, str(product.unit_price)) == (5, "12.00")
        with pytest.raises(ProductNotFound):
            catalog.get_product("prod-002")

    def test_reads_stay_open_in_production(self, client, catalog, monkeypatch):
        catalog.add_product("prod-001", "Mug", "12.00", 5)
        monkeypatch.setenv("PROTEAN_ENV", "production")

        assert client.get("/products").status_code == 200
        assert client.get("/products/prod-001").json()["stock_quantity"] == 5
