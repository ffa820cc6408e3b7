"""
Unit of Work over one connection, and the page container returned by list services.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, Protocol, Sequence, TypeVar

from sqlalchemy.engine import Connection, RootTransaction

from .categories import SqlCategoryRepository
from .products import SqlProductRepository
from .stock_movements import SqlStockMovementRepository
from .users import SqlUserRepository

if TYPE_CHECKING:
    from stock_core.data_repository import Database

T = TypeVar("T")


class UnitOfWork(Protocol):
    """
    One transaction spanning the product, category, user and movement repositories.

    Example:
        with uow:
            uow.stock_movements.add(movement)
            uow.products.apply_quantity_delta(product_id, -3)
            uow.commit()
    """

    @abstractmethod
    def __enter__(self) -> "UnitOfWork":
        ...

    @abstractmethod
    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        ...

    @abstractmethod
    def commit(self) -> None:
        """Make every write of this unit durable."""
        ...

    @abstractmethod
    def rollback(self) -> None:
        """Discard every write of this unit."""
        ...


@dataclass
class PagedResult(Generic[T]):
    """One page of items plus the total row count behind it."""

    items: Sequence[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit


class SqlUnitOfWork:
    """
    Opens a connection and a transaction on enter and binds all four repositories to it.

    Nothing is committed unless ``commit()`` is called; every other exit
    path rolls back and releases the connection.
    """

    def __init__(self, database: "Database"):
        self._database = database
        self._connection: Connection | None = None
        self._transaction: RootTransaction | None = None

    def __enter__(self) -> "SqlUnitOfWork":
        self._connection = self._database.engine.connect()
        self._transaction = self._connection.begin()
        self.products = SqlProductRepository(self._connection)
        self.categories = SqlCategoryRepository(self._connection)
        self.users = SqlUserRepository(self._connection)
        self.stock_movements = SqlStockMovementRepository(self._connection)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            if self._transaction is not None and self._transaction.is_active:
                self.rollback()
        finally:
            if self._connection is not None:
                self._connection.close()
            self._connection = None
            self._transaction = None

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            raise RuntimeError("SqlUnitOfWork is only usable inside a with block")
        return self._connection

    def commit(self) -> None:
        if self._transaction is not None:
            self._transaction.commit()

    def rollback(self) -> None:
        if self._transaction is not None:
            self._transaction.rollback()
