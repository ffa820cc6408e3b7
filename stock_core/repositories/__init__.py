"""
Repository Layer - Clean Architecture pattern for data access.

This module provides:
- Repository protocols per table
- Concrete SQL implementations using SQLAlchemy Core, bound to one connection
- Unit of Work pattern for transaction management
"""

from .base import (
    PagedResult,
    SqlUnitOfWork,
    UnitOfWork,
)
from .categories import Category, CategoryRepository, SqlCategoryRepository
from .products import Product, ProductRepository, SqlProductRepository
from .stock_movements import (
    MovementType,
    SqlStockMovementRepository,
    StockMovement,
    StockMovementRepository,
)
from .users import SqlUserRepository, User, UserRepository

__all__ = [
    # Base
    "PagedResult",
    "SqlUnitOfWork",
    "UnitOfWork",
    # Catalog
    "Category",
    "CategoryRepository",
    "SqlCategoryRepository",
    "Product",
    "ProductRepository",
    "SqlProductRepository",
    # Users
    "User",
    "UserRepository",
    "SqlUserRepository",
    # Stock
    "MovementType",
    "StockMovement",
    "StockMovementRepository",
    "SqlStockMovementRepository",
]
