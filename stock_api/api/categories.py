from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from stock_api.dependencies.database import get_database
from stock_api.schemas.catalog import CategoryIn, CategoryOut
from stock_core import category_service
from stock_core.data_repository import Database
from stock_core.errors import Conflict, InvalidInput, NotFound

router = APIRouter(prefix="/categories", tags=["catalog"])


@router.get("", response_model=list[CategoryOut])
def list_categories(db: Database = Depends(get_database)):
    return category_service.list_categories(db)


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: str, db: Database = Depends(get_database)):
    try:
        return category_service.get_category(db, category_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryIn, db: Database = Depends(get_database)):
    try:
        return category_service.create_category(db, payload.name)
    except InvalidInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Conflict as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(category_id: str, payload: CategoryIn, db: Database = Depends(get_database)):
    try:
        return category_service.rename_category(db, category_id, payload.name)
    except InvalidInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except Conflict as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: str, db: Database = Depends(get_database)):
    try:
        category_service.delete_category(db, category_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
