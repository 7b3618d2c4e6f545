"""Product entity module.

- Product: Domain entity with validation
- ProductTable: Database persistence model
- ProductRepository: Data access layer
"""

from .entity import TEST_PREFIX, Product
from .repository import ProductRepository
from .table import ProductTable

__all__ = ["Product", "ProductRepository", "ProductTable", "TEST_PREFIX"]
