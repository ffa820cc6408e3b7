"""Stock movements: the only code path that changes a product quantity.

Every change is recorded as an append-only movement row and applied to the
product in the same transaction, and never takes the quantity below zero.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import pandas as pd
import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from .data_repository import Database
from .errors import (
    InsufficientStock,
    InvalidInput,
    MovementNotFound,
    ProductNotFound,
    StorageFailure,
)
from .repositories import MovementType, PagedResult, SqlUnitOfWork, StockMovement
from .schema import stock_movements

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 500
MAX_NOTES_LENGTH = 2000
# products.quantity is a 32-bit INTEGER column.
MAX_QUANTITY = 2_147_483_647


@dataclass
class StockAdjustment:
    product_id: str
    product_name: str
    previous_quantity: int
    new_quantity: int
    movement: StockMovement | None = None

    @property
    def movement_created(self) -> bool:
        return self.movement is not None


def _clean_product_id(product_id: Any) -> str:
    if product_id is None:
        raise InvalidInput("product_id is required")
    cleaned = str(product_id).strip()
    if not cleaned:
        raise InvalidInput("product_id is required")
    return cleaned


def _parse_movement_type(direction: Any) -> MovementType:
    if direction is None or direction == "":
        raise InvalidInput("type is required")
    if isinstance(direction, MovementType):
        return direction
    try:
        return MovementType(direction)
    except ValueError:
        raise InvalidInput("type must be either IN or OUT") from None


def _parse_count(value: Any, field: str, *, allow_zero: bool = False) -> int:
    # bool is an int subclass; True must not read as a quantity of 1
    if value is None:
        raise InvalidInput(f"{field} is required")
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{field} must be an integer")
    if value < 0 or (value == 0 and not allow_zero):
        bound = "0 or more" if allow_zero else "greater than 0"
        raise InvalidInput(f"{field} must be {bound}")
    if value > MAX_QUANTITY:
        raise InvalidInput(f"{field} must be at most {MAX_QUANTITY}")
    return value


def _clean_notes(notes: Any) -> str | None:
    if notes is None:
        return None
    if not isinstance(notes, str):
        raise InvalidInput("notes must be a string")
    cleaned = notes.strip()
    if len(cleaned) > MAX_NOTES_LENGTH:
        raise InvalidInput(f"notes must be at most {MAX_NOTES_LENGTH} characters")
    return cleaned or None


def apply_movement(
    uow: SqlUnitOfWork,
    product_id: str,
    movement_type: MovementType,
    quantity: int,
    notes: str | None = None,
) -> StockMovement:
    """Lock, check and write one movement inside an open unit of work (no commit)."""

    current = uow.products.lock_stock(product_id)
    if current is None:
        raise ProductNotFound(product_id)
    product_name, available = current

    delta = quantity if movement_type is MovementType.IN else -quantity
    if available + delta < 0:
        raise InsufficientStock(product_id, available=available, requested=quantity)
    if available + delta > MAX_QUANTITY:
        raise InvalidInput(f"quantity would take the stock of product {product_id} above {MAX_QUANTITY}")

    if not uow.products.apply_quantity_delta(product_id, delta):
        # Lost the race to a concurrent movement that committed after our read.
        latest = uow.products.lock_stock(product_id)
        if latest is None:
            raise ProductNotFound(product_id)
        raise InsufficientStock(product_id, available=latest[1], requested=quantity)

    movement = uow.stock_movements.add(
        StockMovement(
            id=None,
            product_id=product_id,
            type=movement_type,
            quantity=quantity,
            notes=notes,
        )
    )
    movement.product_name = product_name
    return movement


def record_movement(
    db: Database,
    product_id: Any,
    direction: Any,
    quantity: Any,
    notes: Any = None,
) -> StockMovement:
    """Apply an IN/OUT quantity change to a product and record it, atomically.

    Raises:
        InvalidInput: before any storage access, for a missing or malformed field.
        ProductNotFound: the product does not exist; nothing written.
        InsufficientStock: an OUT would take the quantity below zero; nothing written.
        StorageFailure: the database failed; both writes were rolled back.
    """

    product_id = _clean_product_id(product_id)
    movement_type = _parse_movement_type(direction)
    quantity = _parse_count(quantity, "quantity")
    notes = _clean_notes(notes)

    try:
        with SqlUnitOfWork(db) as uow:
            movement = apply_movement(uow, product_id, movement_type, quantity, notes)
            uow.commit()
    except InsufficientStock as exc:
        logger.info("Stock movement rejected: %s", exc)
        raise
    except SQLAlchemyError as exc:
        logger.exception("Stock movement on product %s rolled back", product_id)
        raise StorageFailure(f"Could not record stock movement for product {product_id}") from exc

    logger.info(
        "Stock movement %s recorded: %s %s x%d",
        movement.id,
        product_id,
        movement_type.value,
        quantity,
    )
    return movement


def adjust_to_target(
    uow: SqlUnitOfWork,
    product_id: str,
    target_quantity: int,
    notes: str | None = None,
) -> StockAdjustment:
    """Record the IN/OUT movement that brings a product to ``target_quantity`` (no commit)."""

    current = uow.products.lock_stock(product_id)
    if current is None:
        raise ProductNotFound(product_id)
    product_name, available = current

    delta = target_quantity - available
    if delta == 0:
        return StockAdjustment(
            product_id=product_id,
            product_name=product_name,
            previous_quantity=available,
            new_quantity=available,
        )

    movement_type = MovementType.IN if delta > 0 else MovementType.OUT
    movement = apply_movement(
        uow,
        product_id,
        movement_type,
        abs(delta),
        notes or f"Stock adjustment to {target_quantity}",
    )
    # A concurrent movement between the two reads shifts the result off the target.
    latest = uow.products.lock_stock(product_id)
    if latest is None:
        raise ProductNotFound(product_id)
    return StockAdjustment(
        product_id=product_id,
        product_name=product_name,
        previous_quantity=available,
        new_quantity=latest[1],
        movement=movement,
    )


def adjust_stock_level(
    db: Database,
    product_id: Any,
    target_quantity: Any,
    notes: Any = None,
) -> StockAdjustment:
    """Bring a product to an absolute quantity through a recorded movement."""

    product_id = _clean_product_id(product_id)
    target_quantity = _parse_count(target_quantity, "target_quantity", allow_zero=True)
    notes = _clean_notes(notes)

    try:
        with SqlUnitOfWork(db) as uow:
            adjustment = adjust_to_target(uow, product_id, target_quantity, notes)
            uow.commit()
    except SQLAlchemyError as exc:
        logger.exception("Stock adjustment on product %s rolled back", product_id)
        raise StorageFailure(f"Could not adjust stock for product {product_id}") from exc

    if adjustment.movement_created:
        logger.info(
            "Stock of %s adjusted %d -> %d",
            product_id,
            adjustment.previous_quantity,
            adjustment.new_quantity,
        )
    return adjustment


def get_movement(db: Database, movement_id: str) -> StockMovement:
    try:
        with SqlUnitOfWork(db) as uow:
            movement = uow.stock_movements.get_by_id(movement_id)
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not load stock movement") from exc
    if movement is None:
        raise MovementNotFound(movement_id)
    return movement


def list_movements(
    db: Database,
    *,
    product_id: str | None = None,
    movement_type: Any = None,
    page: int = 1,
    limit: int = 100,
) -> PagedResult[StockMovement]:
    """One page of movements joined with their product name, newest first."""

    parsed_type = _parse_movement_type(movement_type) if movement_type else None
    page = max(1, int(page))
    limit = max(1, min(int(limit), MAX_LIST_LIMIT))
    try:
        with SqlUnitOfWork(db) as uow:
            items, total = uow.stock_movements.list_page(
                product_id=product_id,
                movement_type=parsed_type,
                limit=limit,
                offset=(page - 1) * limit,
            )
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not list stock movements") from exc
    return PagedResult(items=list(items), total=total, page=page, limit=limit)


def fetch_movement_timeseries(
    db: Database,
    *,
    window_days: int = 30,
    product_id: str | None = None,
) -> pd.DataFrame:
    """Daily IN/OUT totals over the last ``window_days`` days.

    Columns: ``day``, ``type``, ``quantity``; one row per day and type that saw movements.
    """

    since = datetime.now(timezone.utc) - timedelta(days=max(1, int(window_days)))
    stmt = sa.select(
        stock_movements.c.created_at,
        stock_movements.c.type,
        stock_movements.c.quantity,
    ).where(stock_movements.c.created_at >= since)
    if product_id is not None:
        stmt = stmt.where(stock_movements.c.product_id == product_id)

    try:
        df = db.query_df(stmt)
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not load stock movement history") from exc

    if df.empty:
        return pd.DataFrame(columns=["day", "type", "quantity"])

    df["day"] = pd.to_datetime(df["created_at"], utc=True).dt.date
    df["type"] = df["type"].astype(str)
    return (
        df.groupby(["day", "type"], as_index=False)["quantity"]
        .sum()
        .sort_values(["day", "type"])
        .reset_index(drop=True)
    )


__all__ = [
    "StockAdjustment",
    "apply_movement",
    "record_movement",
    "adjust_to_target",
    "adjust_stock_level",
    "get_movement",
    "list_movements",
    "fetch_movement_timeseries",
]
