from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from stock_api.dependencies.database import get_database
from stock_api.schemas.catalog import ProductCreate, ProductOut, ProductPage, ProductUpdate
from stock_api.schemas.common import PagingMeta
from stock_core import product_service
from stock_core.data_repository import Database
from stock_core.errors import InsufficientStock, InvalidInput, NotFound

router = APIRouter(prefix="/products", tags=["catalog"])


@router.get("", response_model=ProductPage)
def list_products(
    search: str | None = None,
    category_id: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Database = Depends(get_database),
):
    result = product_service.list_products(
        db,
        search=search,
        category_id=category_id,
        page=page,
        limit=limit,
    )
    return {"items": result.items, "meta": PagingMeta.from_page(result)}


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: Database = Depends(get_database)):
    try:
        return product_service.get_product(db, product_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, db: Database = Depends(get_database)):
    try:
        return product_service.create_product(db, payload.model_dump())
    except InvalidInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: str, payload: ProductUpdate, db: Database = Depends(get_database)):
    try:
        return product_service.update_product(db, product_id, payload.model_dump(exclude_unset=True))
    except (InvalidInput, InsufficientStock) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: str, db: Database = Depends(get_database)):
    try:
        product_service.delete_product(db, product_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
