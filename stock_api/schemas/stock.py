"""Schemas for stock movement endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel

from stock_api.schemas.common import PagingMeta
from stock_core.repositories import MovementType


class StockMovementCreate(BaseModel):
    # Left loose so the service reports missing or malformed fields itself.
    product_id: Optional[str] = None
    type: Optional[str] = None
    quantity: Any = None
    notes: Optional[str] = None


class StockMovementOut(BaseModel):
    id: str
    product_id: str
    product_name: Optional[str] = None
    type: MovementType
    quantity: int
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = dict(from_attributes=True)


class StockMovementPage(BaseModel):
    items: List[StockMovementOut]
    meta: PagingMeta


class StockAdjustmentRequest(BaseModel):
    product_id: Optional[str] = None
    target_quantity: Any = None
    notes: Optional[str] = None


class StockAdjustmentResponse(BaseModel):
    product_id: str
    product_name: str
    previous_quantity: int
    new_quantity: int
    movement_created: bool
    movement: Optional[StockMovementOut] = None


class MovementPoint(BaseModel):
    day: date
    type: MovementType
    quantity: int


class MovementSummaryResponse(BaseModel):
    items: List[MovementPoint]


__all__ = [
    "StockMovementCreate",
    "StockMovementOut",
    "StockMovementPage",
    "StockAdjustmentRequest",
    "StockAdjustmentResponse",
    "MovementPoint",
    "MovementSummaryResponse",
]
