"""Product domain entity."""

from decimal import Decimal
from typing import Any

from pydantic import Field

from src.debugkit.entities._base import Entity

TEST_PREFIX = "TEST_"


class Product(Entity):
    """A row of the demo ``products`` catalog.

    Price and stock are validated here as well as by the database CHECK
    constraints, so bad input fails before a round trip.
    """

    name: str = Field(min_length=1, max_length=255, description="Product name")
    description: str | None = Field(default=None, description="Product description")
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2, description="Price in USD")
    stock_quantity: int = Field(default=0, ge=0, description="Available inventory count")

    @property
    def is_test_product(self) -> bool:
        return self.name.startswith(TEST_PREFIX)

    def to_insert_payload(self) -> dict[str, Any]:
        """Columns the caller supplies on insert; the database fills the rest."""
        return {
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "stock_quantity": self.stock_quantity,
        }

    def __eq__(self, other: Any) -> bool:
        """Compare products by business attributes, ignoring timestamps."""
        if not isinstance(other, Product):
            return False

        return (
            self.id == other.id
            and self.name == other.name
            and self.price == other.price
            and self.stock_quantity == other.stock_quantity
        )

    def __hash__(self) -> int:
        return hash((self.id, self.name, self.price, self.stock_quantity))
