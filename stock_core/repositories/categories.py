"""
Category Repository - Data access for the categories table.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol, Sequence

import sqlalchemy as sa
from sqlalchemy.engine import Connection

from stock_core.schema import categories, new_id, utcnow


@dataclass
class Category:
    """Category entity."""

    id: str | None
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CategoryRepository(Protocol):
    """Category repository interface."""

    def get_by_id(self, id: str) -> Category | None:
        ...

    def list_all(self) -> Sequence[Category]:
        ...

    def add(self, category: Category) -> Category:
        ...

    def rename(self, id: str, name: str) -> bool:
        ...

    def delete(self, id: str) -> bool:
        ...


class SqlCategoryRepository:
    """SQLAlchemy implementation of CategoryRepository bound to one connection."""

    def __init__(self, connection: Connection):
        self._conn = connection

    def get_by_id(self, id: str) -> Category | None:
        row = self._conn.execute(sa.select(categories).where(categories.c.id == id)).first()
        if row is None:
            return None
        return self._row_to_category(row._mapping)

    def exists(self, id: str) -> bool:
        return self._conn.execute(
            sa.select(categories.c.id).where(categories.c.id == id)
        ).first() is not None

    def list_all(self) -> Sequence[Category]:
        rows = self._conn.execute(sa.select(categories).order_by(categories.c.name)).fetchall()
        return [self._row_to_category(row._mapping) for row in rows]

    def add(self, category: Category) -> Category:
        category.id = category.id or new_id()
        now = utcnow()
        self._conn.execute(
            sa.insert(categories).values(id=category.id, name=category.name, created_at=now, updated_at=now)
        )
        category.created_at = now
        category.updated_at = now
        return category

    def rename(self, id: str, name: str) -> bool:
        result = self._conn.execute(
            sa.update(categories).where(categories.c.id == id).values(name=name, updated_at=utcnow())
        )
        return result.rowcount == 1

    def delete(self, id: str) -> bool:
        result = self._conn.execute(sa.delete(categories).where(categories.c.id == id))
        return result.rowcount == 1

    def _row_to_category(self, row: Any) -> Category:
        return Category(
            id=row["id"],
            name=row["name"],
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
