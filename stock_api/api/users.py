"""User administration; accounts can only be modified by their owner."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from stock_api.dependencies.database import get_database
from stock_api.dependencies.security import get_current_user
from stock_api.schemas.auth import UserOut, UserPage, UserUpdate
from stock_api.schemas.common import PagingMeta
from stock_core import user_service
from stock_core.data_repository import Database
from stock_core.errors import Conflict, InvalidInput, NotFound
from stock_core.repositories import User

router = APIRouter(prefix="/users", tags=["users"])


def _require_self(user_id: str, current_user: User) -> None:
    if current_user.id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only modify your own account",
        )


@router.get("", response_model=UserPage)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Database = Depends(get_database),
):
    result = user_service.list_users(db, page=page, limit=limit)
    return {"items": result.items, "meta": PagingMeta.from_page(result)}


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Database = Depends(get_database)):
    try:
        return user_service.get_user(db, user_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: str,
    payload: UserUpdate,
    db: Database = Depends(get_database),
    current_user: User = Depends(get_current_user),
):
    _require_self(user_id, current_user)
    try:
        return user_service.update_user(db, user_id, payload.model_dump(exclude_none=True))
    except InvalidInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except Conflict as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    db: Database = Depends(get_database),
    current_user: User = Depends(get_current_user),
):
    _require_self(user_id, current_user)
    try:
        user_service.delete_user(db, user_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
