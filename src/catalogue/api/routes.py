"""FastAPI endpoints for the Catalogue: product management for seeding and demos.

Reads are always available. Creating, restocking and repricing products is
refused when PROTEAN_ENV is 'production'; stock there only moves through
checkout.
"""

import os

from fastapi import APIRouter, HTTPException

from catalogue.api.schemas import CreateProductRequest, ProductResponse, RestockRequest, SetPriceRequest
from catalogue.products import get_catalog
from catalogue.products.port import ProductSnapshot

product_router = APIRouter(prefix="/products", tags=["products"])


def _require_non_production():
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Catalogue management not available in production")


def _product_response(product: ProductSnapshot) -> ProductResponse:
    return ProductResponse(
        product_id=product.product_id,
        name=product.name,
        unit_price=str(product.unit_price),
        stock_quantity=product.stock_quantity,
        category=product.category,
        is_available=product.is_available,
    )


@product_router.post("", status_code=201, response_model=ProductResponse)
async def create_product(body: CreateProductRequest) -> ProductResponse:
    _require_non_production()
    product = get_catalog().add_product(
        product_id=body.product_id,
        name=body.name,
        unit_price=body.unit_price,
        stock_quantity=body.stock_quantity,
        category=body.category,
    )
    return _product_response(product)


@product_router.get("", response_model=list[ProductResponse])
async def list_products() -> list[ProductResponse]:
    return [_product_response(p) for p in get_catalog().list_products()]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    return _product_response(get_catalog().get_product(product_id))


@product_router.put("/{product_id}/stock", response_model=ProductResponse)
async def restock_product(product_id: str, body: RestockRequest) -> ProductResponse:
    _require_non_production()
    return _product_response(get_catalog().restock(product_id, body.stock_quantity))


@product_router.put("/{product_id}/price", response_model=ProductResponse)
async def set_product_price(product_id: str, body: SetPriceRequest) -> ProductResponse:
    _require_non_production()
    return _product_response(get_catalog().set_price(product_id, body.unit_price))
