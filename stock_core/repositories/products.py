"""
Product Repository - Data access for the products table.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol, Sequence

import sqlalchemy as sa
from sqlalchemy.engine import Connection

from stock_core.schema import categories, new_id, products, utcnow


@dataclass
class Product:
    """Product entity."""

    id: str | None
    name: str
    price: Decimal
    quantity: int = 0
    description: str | None = None
    category_id: str | None = None
    category_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductRepository(Protocol):
    """Product repository interface."""

    def get_by_id(self, id: str) -> Product | None:
        ...

    def lock_stock(self, id: str) -> tuple[str, int] | None:
        ...

    def apply_quantity_delta(self, id: str, delta: int) -> bool:
        ...

    def list_page(
        self, *, search: str | None = None, category_id: str | None = None, limit: int = 10, offset: int = 0
    ) -> tuple[Sequence[Product], int]:
        ...

    def add(self, product: Product) -> Product:
        ...

    def update(self, id: str, changes: dict[str, Any]) -> bool:
        ...

    def delete(self, id: str) -> bool:
        ...


_SELECT_COLUMNS = (
    products.c.id,
    products.c.name,
    products.c.description,
    products.c.category_id,
    categories.c.name.label("category_name"),
    products.c.price,
    products.c.quantity,
    products.c.created_at,
    products.c.updated_at,
)

# quantity is only ever written through apply_quantity_delta
_UPDATABLE = frozenset({"name", "description", "category_id", "price"})


class SqlProductRepository:
    """SQLAlchemy implementation of ProductRepository bound to one connection."""

    def __init__(self, connection: Connection):
        self._conn = connection

    def _base_select(self) -> sa.Select:
        return sa.select(*_SELECT_COLUMNS).select_from(
            products.outerjoin(categories, products.c.category_id == categories.c.id)
        )

    def get_by_id(self, id: str) -> Product | None:
        row = self._conn.execute(self._base_select().where(products.c.id == id)).first()
        if row is None:
            return None
        return self._row_to_product(row._mapping)

    def lock_stock(self, id: str) -> tuple[str, int] | None:
        """Read name and quantity, holding a row lock until the transaction ends where supported."""

        row = self._conn.execute(
            sa.select(products.c.name, products.c.quantity)
            .where(products.c.id == id)
            .with_for_update()
        ).first()
        if row is None:
            return None
        return str(row.name), int(row.quantity or 0)

    def apply_quantity_delta(self, id: str, delta: int) -> bool:
        """Atomically add ``delta`` unless the result would be negative. Returns False when nothing matched."""

        result = self._conn.execute(
            sa.update(products)
            .where(products.c.id == id)
            .where(products.c.quantity + delta >= 0)
            .values(quantity=products.c.quantity + delta, updated_at=utcnow())
        )
        return result.rowcount == 1

    def _filters(self, search: str | None, category_id: str | None) -> list[sa.ColumnElement[bool]]:
        clauses: list[sa.ColumnElement[bool]] = []
        if search:
            pattern = f"%{search.lower()}%"
            clauses.append(
                sa.or_(
                    sa.func.lower(products.c.name).like(pattern),
                    sa.func.lower(categories.c.name).like(pattern),
                )
            )
        if category_id:
            clauses.append(products.c.category_id == category_id)
        return clauses

    def list_page(
        self, *, search: str | None = None, category_id: str | None = None, limit: int = 10, offset: int = 0
    ) -> tuple[Sequence[Product], int]:
        clauses = self._filters(search, category_id)

        count_stmt = (
            sa.select(sa.func.count())
            .select_from(products.outerjoin(categories, products.c.category_id == categories.c.id))
            .where(*clauses)
        )
        total = int(self._conn.execute(count_stmt).scalar() or 0)

        rows = self._conn.execute(
            self._base_select()
            .where(*clauses)
            .order_by(products.c.created_at.desc(), products.c.name, products.c.id)
            .limit(limit)
            .offset(offset)
        ).fetchall()
        return [self._row_to_product(row._mapping) for row in rows], total

    def add(self, product: Product) -> Product:
        product.id = product.id or new_id()
        now = utcnow()
        self._conn.execute(
            sa.insert(products).values(
                id=product.id,
                name=product.name,
                description=product.description,
                category_id=product.category_id,
                price=product.price,
                quantity=product.quantity,
                created_at=now,
                updated_at=now,
            )
        )
        product.created_at = now
        product.updated_at = now
        return product

    def update(self, id: str, changes: dict[str, Any]) -> bool:
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise ValueError(f"Columns not updatable here: {', '.join(sorted(unknown))}")
        result = self._conn.execute(
            sa.update(products).where(products.c.id == id).values(**changes, updated_at=utcnow())
        )
        return result.rowcount == 1

    def delete(self, id: str) -> bool:
        result = self._conn.execute(sa.delete(products).where(products.c.id == id))
        return result.rowcount == 1

    def _row_to_product(self, row: Any) -> Product:
        return Product(
            id=row["id"],
            name=row["name"],
            description=row.get("description"),
            category_id=row.get("category_id"),
            category_name=row.get("category_name"),
            price=Decimal(str(row["price"])),
            quantity=int(row["quantity"] or 0),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
