"""Direct-SQL helpers to seed and inspect a test database."""

from __future__ import annotations

from decimal import Decimal

import sqlalchemy as sa

from stock_core.data_repository import Database
from stock_core.schema import categories, new_id, products, stock_movements, utcnow


def seed_category(db: Database, name: str = "Beverages") -> str:
    category_id = new_id()
    now = utcnow()
    with db.engine.begin() as conn:
        conn.execute(
            sa.insert(categories).values(id=category_id, name=name, created_at=now, updated_at=now)
        )
    return category_id


def seed_product(
    db: Database,
    *,
    name: str = "Sparkling water 1L",
    quantity: int = 0,
    price: str = "1.50",
    category_id: str | None = None,
) -> str:
    """Insert a product row without recording any movement."""

    product_id = new_id()
    now = utcnow()
    with db.engine.begin() as conn:
        conn.execute(
            sa.insert(products).values(
                id=product_id,
                name=name,
                price=Decimal(price),
                quantity=quantity,
                category_id=category_id,
                created_at=now,
                updated_at=now,
            )
        )
    return product_id


def quantity_of(db: Database, product_id: str) -> int | None:
    with db.engine.connect() as conn:
        value = conn.execute(sa.select(products.c.quantity).where(products.c.id == product_id)).scalar()
    return None if value is None else int(value)


def movement_rows(db: Database, product_id: str | None = None) -> list[dict]:
    stmt = sa.select(stock_movements).order_by(stock_movements.c.created_at)
    if product_id is not None:
        stmt = stmt.where(stock_movements.c.product_id == product_id)
    with db.engine.connect() as conn:
        return [dict(row._mapping) for row in conn.execute(stmt)]
