"""Table definitions shared by the repositories, the bootstrap and the Alembic revision."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

MOVEMENT_TYPES: tuple[str, ...] = ("IN", "OUT")

metadata = sa.MetaData()


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


users = sa.Table(
    "users",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True, default=new_id),
    sa.Column("name", sa.String(255), nullable=False),
    sa.Column("email", sa.String(255), nullable=False, unique=True),
    sa.Column("password_hash", sa.String(255), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, default=utcnow, server_default=sa.func.now()),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, default=utcnow, server_default=sa.func.now()),
)

categories = sa.Table(
    "categories",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True, default=new_id),
    sa.Column("name", sa.String(255), nullable=False, unique=True),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, default=utcnow, server_default=sa.func.now()),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, default=utcnow, server_default=sa.func.now()),
)

products = sa.Table(
    "products",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True, default=new_id),
    sa.Column("name", sa.String(255), nullable=False),
    sa.Column("description", sa.Text),
    sa.Column("category_id", sa.String(36), sa.ForeignKey("categories.id", ondelete="SET NULL")),
    sa.Column("price", sa.Numeric(10, 2), nullable=False),
    sa.Column("quantity", sa.Integer, nullable=False, server_default="0"),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, default=utcnow, server_default=sa.func.now()),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, default=utcnow, server_default=sa.func.now()),
    sa.CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
    sa.CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
)

stock_movements = sa.Table(
    "stock_movements",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True, default=new_id),
    sa.Column(
        "product_id",
        sa.String(36),
        sa.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    ),
    sa.Column("type", sa.Enum(*MOVEMENT_TYPES, name="movement_type"), nullable=False),
    sa.Column("quantity", sa.Integer, nullable=False),
    sa.Column("notes", sa.Text),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, default=utcnow, server_default=sa.func.now()),
    sa.CheckConstraint("quantity > 0", name="ck_stock_movements_quantity_positive"),
)

sa.Index("idx_products_category", products.c.category_id)
sa.Index("idx_stock_movements_product", stock_movements.c.product_id)
sa.Index("idx_stock_movements_created", stock_movements.c.created_at)


def ensure_schema(engine: Engine) -> None:
    """Create the tables when they are missing (idempotent)."""

    metadata.create_all(engine, checkfirst=True)
    logger.info("Database schema ready (%s)", engine.dialect.name)


__all__ = [
    "MOVEMENT_TYPES",
    "metadata",
    "users",
    "categories",
    "products",
    "stock_movements",
    "ensure_schema",
    "new_id",
    "utcnow",
]
