"""Stock movement endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from stock_api.dependencies.database import get_database
from stock_api.schemas.common import PagingMeta
from stock_api.schemas.stock import (
    MovementSummaryResponse,
    StockAdjustmentRequest,
    StockAdjustmentResponse,
    StockMovementCreate,
    StockMovementOut,
    StockMovementPage,
)
from stock_core import stock_service
from stock_core.data_repository import Database
from stock_core.errors import InsufficientStock, InvalidInput, NotFound

router = APIRouter(prefix="/stock-movements", tags=["stock"])


@router.post("", response_model=StockMovementOut, status_code=status.HTTP_201_CREATED)
def create_stock_movement(payload: StockMovementCreate, db: Database = Depends(get_database)):
    try:
        return stock_service.record_movement(
            db,
            payload.product_id,
            payload.type,
            payload.quantity,
            payload.notes,
        )
    except (InvalidInput, InsufficientStock) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("", response_model=StockMovementPage)
def list_stock_movements(
    product_id: str | None = Query(default=None),
    movement_type: str | None = Query(default=None, alias="type"),
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    db: Database = Depends(get_database),
):
    try:
        result = stock_service.list_movements(
            db,
            product_id=product_id,
            movement_type=movement_type,
            page=page,
            limit=limit,
        )
    except InvalidInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return {"items": result.items, "meta": PagingMeta.from_page(result)}


@router.get("/summary", response_model=MovementSummaryResponse)
def get_movement_summary(
    window_days: int = Query(30, ge=1, le=365),
    product_id: str | None = Query(default=None),
    db: Database = Depends(get_database),
):
    df = stock_service.fetch_movement_timeseries(db, window_days=window_days, product_id=product_id)
    return MovementSummaryResponse(items=df.to_dict(orient="records"))


@router.post("/adjustments", response_model=StockAdjustmentResponse)
def create_stock_adjustment(payload: StockAdjustmentRequest, db: Database = Depends(get_database)):
    try:
        adjustment = stock_service.adjust_stock_level(
            db,
            payload.product_id,
            payload.target_quantity,
            payload.notes,
        )
    except (InvalidInput, InsufficientStock) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    movement = adjustment.movement
    return StockAdjustmentResponse(
        product_id=adjustment.product_id,
        product_name=adjustment.product_name,
        previous_quantity=adjustment.previous_quantity,
        new_quantity=adjustment.new_quantity,
        movement_created=adjustment.movement_created,
        movement=StockMovementOut.model_validate(movement) if movement is not None else None,
    )


@router.get("/{movement_id}", response_model=StockMovementOut)
def get_stock_movement(movement_id: str, db: Database = Depends(get_database)):
    try:
        return stock_service.get_movement(db, movement_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
