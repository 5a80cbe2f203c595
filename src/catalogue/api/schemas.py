"""Pydantic request/response schemas for the Catalogue API."""

from decimal import Decimal

from pydantic import BaseModel, Field


class CreateProductRequest(BaseModel):
    product_id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=100)
    unit_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    stock_quantity: int = Field(ge=0)
    category: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "name": "Espresso Grinder",
                    "unit_price": "149.99",
                    "stock_quantity": 25,
                    "category": "Kitchen",
                }
            ]
        }
    }


class RestockRequest(BaseModel):
    stock_quantity: int = Field(ge=0)


class SetPriceRequest(BaseModel):
    unit_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)


class ProductResponse(BaseModel):
    product_id: str
    name: str
    unit_price: str
    stock_quantity: int
    category: str | None
    is_available: bool
