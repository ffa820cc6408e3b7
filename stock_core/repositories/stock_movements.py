"""
Stock Movement Repository - Data access for the stock_movements table.

Movements are append-only: there is no update or delete here, rows only
disappear through the cascade when their product is deleted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Protocol, Sequence

import sqlalchemy as sa
from sqlalchemy.engine import Connection

from stock_core.schema import new_id, products, stock_movements, utcnow


class MovementType(str, Enum):
    IN = "IN"
    OUT = "OUT"


@dataclass
class StockMovement:
    """Stock movement record, with the product name when read through the join."""

    id: str | None
    product_id: str
    type: MovementType
    quantity: int
    notes: str | None = None
    product_name: str | None = None
    created_at: datetime | None = None

    @property
    def signed_quantity(self) -> int:
        return self.quantity if self.type is MovementType.IN else -self.quantity


class StockMovementRepository(Protocol):
    """Stock movement repository interface."""

    def get_by_id(self, id: str) -> StockMovement | None:
        ...

    def list_page(
        self,
        *,
        product_id: str | None = None,
        movement_type: MovementType | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[Sequence[StockMovement], int]:
        ...

    def add(self, movement: StockMovement) -> StockMovement:
        ...


class SqlStockMovementRepository:
    """SQLAlchemy implementation of StockMovementRepository bound to one connection."""

    def __init__(self, connection: Connection):
        self._conn = connection

    def _base_select(self) -> sa.Select:
        return sa.select(
            stock_movements.c.id,
            stock_movements.c.product_id,
            stock_movements.c.type,
            stock_movements.c.quantity,
            stock_movements.c.notes,
            stock_movements.c.created_at,
            products.c.name.label("product_name"),
        ).select_from(stock_movements.join(products, stock_movements.c.product_id == products.c.id))

    def get_by_id(self, id: str) -> StockMovement | None:
        row = self._conn.execute(self._base_select().where(stock_movements.c.id == id)).first()
        if row is None:
            return None
        return self._row_to_movement(row._mapping)

    def list_page(
        self,
        *,
        product_id: str | None = None,
        movement_type: MovementType | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[Sequence[StockMovement], int]:
        clauses = []
        if product_id is not None:
            clauses.append(stock_movements.c.product_id == product_id)
        if movement_type is not None:
            clauses.append(stock_movements.c.type == movement_type.value)

        count_stmt = sa.select(sa.func.count()).select_from(stock_movements).where(*clauses)
        total = int(self._conn.execute(count_stmt).scalar() or 0)

        # id breaks ties between movements stamped in the same instant
        rows = self._conn.execute(
            self._base_select()
            .where(*clauses)
            .order_by(stock_movements.c.created_at.desc(), stock_movements.c.id.desc())
            .limit(limit)
            .offset(offset)
        ).fetchall()
        return [self._row_to_movement(row._mapping) for row in rows], total

    def add(self, movement: StockMovement) -> StockMovement:
        movement.id = movement.id or new_id()
        movement.created_at = movement.created_at or utcnow()
        self._conn.execute(
            sa.insert(stock_movements).values(
                id=movement.id,
                product_id=movement.product_id,
                type=movement.type.value,
                quantity=movement.quantity,
                notes=movement.notes,
                created_at=movement.created_at,
            )
        )
        return movement

    def _row_to_movement(self, row: Any) -> StockMovement:
        return StockMovement(
            id=row["id"],
            product_id=row["product_id"],
            type=MovementType(row["type"]),
            quantity=int(row["quantity"]),
            notes=row.get("notes"),
            product_name=row.get("product_name"),
            created_at=row.get("created_at"),
        )
