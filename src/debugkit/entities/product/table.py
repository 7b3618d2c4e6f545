"""Product database table model."""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Text
from sqlmodel import Field

from src.debugkit.entities._base import EntityTable


class ProductTable(EntityTable, table=True):
    """Database persistence model for products.

    Mirrors ``database/migrations/001_create_products_table.sql`` closely enough
    to run the same constraints on any engine.
    """

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="products_price_check"),
        CheckConstraint("stock_quantity >= 0", name="products_stock_quantity_check"),
    )

    name: str = Field(max_length=255, nullable=False, index=True)
    description: str | None = Field(default=None, sa_type=Text)
    price: Decimal = Field(max_digits=10, decimal_places=2, nullable=False, index=True)
    stock_quantity: int = Field(default=0, nullable=False, index=True)
