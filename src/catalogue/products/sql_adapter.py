"""SQLAlchemy product catalogue: SQLite and PostgreSQL.

Stock reservation relies on the database's row-level atomic update:

    UPDATE products
       SET stock_quantity = stock_quantity - :quantity
     WHERE id = :product_id AND stock_quantity >= :quantity

and inspects the affected-row count, so concurrent checkouts in separate
processes can never jointly drive stock below zero.
"""

from datetime import UTC, datetime
from decimal import Decimal

import structlog
from protean.exceptions import ValidationError
from shared.errors import PersistenceFailure, ProductNotFound
from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    create_engine,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from catalogue.products.port import ProductCatalog, ProductSnapshot, to_decimal, validate_levels

logger = structlog.get_logger(__name__)

metadata = MetaData()

products = Table(
    "products",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(100), nullable=False),
    Column("unit_price", Numeric(12, 2, asdecimal=True), nullable=False),
    Column("stock_quantity", Integer, nullable=False, default=0),
    Column("category", String(100)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)


def _to_snapshot(row) -> ProductSnapshot:
    return ProductSnapshot(
        product_id=row.id,
        name=row.name,
        unit_price=Decimal(row.unit_price),
        stock_quantity=row.stock_quantity,
        category=row.category,
        updated_at=row.updated_at,
    )


class SqlAlchemyCatalog(ProductCatalog):
    """Catalogue stored in a relational ``products`` table."""

    def __init__(self, database_uri: str | None = None, engine: Engine | None = None):
        if engine is None and database_uri is None:
            raise ValueError("Either database_uri or engine is required")
        self.engine = engine if engine is not None else create_engine(database_uri)

    def create_schema(self) -> None:
        metadata.create_all(self.engine)

    def drop_schema(self) -> None:
        metadata.drop_all(self.engine)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_product(self, product_id: str) -> ProductSnapshot:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(select(products).where(products.c.id == str(product_id))).first()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Catalogue unavailable: {exc}") from exc

        if row is None:
            raise ProductNotFound(str(product_id))
        return _to_snapshot(row)

    def list_products(self) -> list[ProductSnapshot]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(select(products).order_by(products.c.id)).all()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Catalogue unavailable: {exc}") from exc
        return [_to_snapshot(row) for row in rows]

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def decrement_stock(self, product_id: str, quantity: int) -> bool:
        stmt = (
            update(products)
            .where(products.c.id == str(product_id))
            .where(products.c.stock_quantity >= quantity)
            .values(
                stock_quantity=products.c.stock_quantity - quantity,
                updated_at=datetime.now(UTC),
            )
        )
        try:
            with self.engine.begin() as conn:
                updated = conn.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Catalogue unavailable: {exc}") from exc

        if updated == 1:
            return True

        # Zero rows: either the product is gone or stock is short
        self.get_product(product_id)
        return False

    def increment_stock(self, product_id: str, quantity: int) -> None:
        stmt = (
            update(products)
            .where(products.c.id == str(product_id))
            .values(
                stock_quantity=products.c.stock_quantity + quantity,
                updated_at=datetime.now(UTC),
            )
        )
        try:
            with self.engine.begin() as conn:
                updated = conn.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Catalogue unavailable: {exc}") from exc

        if updated == 0:
            raise ProductNotFound(str(product_id))

    # -------------------------------------------------------------------
    # Catalogue management
    # -------------------------------------------------------------------
    def add_product(self, product_id, name, unit_price, stock_quantity, category=None) -> ProductSnapshot:
        validate_levels(unit_price=unit_price, stock_quantity=stock_quantity)
        now = datetime.now(UTC)
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    insert(products).values(
                        id=str(product_id),
                        name=name,
                        unit_price=to_decimal(unit_price),
                        stock_quantity=stock_quantity,
                        category=category,
                        created_at=now,
                        updated_at=now,
                    )
                )
        except IntegrityError as exc:
            raise ValidationError({"product_id": [f"Product {product_id} already exists"]}) from exc
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Catalogue unavailable: {exc}") from exc

        logger.info("Product added", product_id=str(product_id), stock_quantity=stock_quantity)
        return self.get_product(product_id)

    def restock(self, product_id: str, stock_quantity: int) -> ProductSnapshot:
        validate_levels(stock_quantity=stock_quantity)
        self._update_fields(product_id, stock_quantity=stock_quantity)
        return self.get_product(product_id)

    def set_price(self, product_id: str, unit_price: Decimal) -> ProductSnapshot:
        validate_levels(unit_price=unit_price)
        self._update_fields(product_id, unit_price=to_decimal(unit_price))
        return self.get_product(product_id)

    def _update_fields(self, product_id, **values):
        stmt = update(products).where(products.c.id == str(product_id)).values(updated_at=datetime.now(UTC), **values)
        try:
            with self.engine.begin() as conn:
                updated = conn.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Catalogue unavailable: {exc}") from exc

        if updated == 0:
            raise ProductNotFound(str(product_id))
