from sqlalchemy import delete, func
from sqlmodel import Session, select

from src.debugkit.entities.product.entity import TEST_PREFIX, Product
from src.debugkit.entities.product.table import ProductTable


class ProductRepository:
    """Data-access layer for products over a direct database session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list(self, limit: int | None = None) -> list[Product]:
        statement = select(ProductTable).order_by(ProductTable.name)
        if limit is not None:
            statement = statement.limit(limit)
        rows = self._session.exec(statement).all()
        return [Product.model_validate(row, from_attributes=True) for row in rows]

    def get(self, product_id: str) -> Product | None:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return None
        return Product.model_validate(row, from_attributes=True)

    def count(self) -> int:
        return self._session.exec(select(func.count()).select_from(ProductTable)).one()

    def create(self, product: Product) -> Product:
        row = ProductTable(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            stock_quantity=product.stock_quantity,
        )
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Product.model_validate(row, from_attributes=True)

    def update(self, product_id: str, **changes) -> Product | None:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return None
        # Re-validate through the entity so constraint violations surface early
        updated = Product.model_validate(
            {**Product.model_validate(row, from_attributes=True).model_dump(), **changes}
        )
        for field in ("name", "description", "price", "stock_quantity"):
            setattr(row, field, getattr(updated, field))
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Product.model_validate(row, from_attributes=True)

    def delete(self, product_id: str) -> bool:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def delete_test_products(self, prefix: str = TEST_PREFIX) -> int:
        """Delete rows whose name starts with ``prefix``; returns the row count."""
        statement = delete(ProductTable).where(ProductTable.name.like(f"{prefix}%"))
        result = self._session.execute(statement)
        return result.rowcount
