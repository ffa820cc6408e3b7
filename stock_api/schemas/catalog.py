from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from stock_api.schemas.common import PagingMeta


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class CategoryOut(BaseModel):
    id: str
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = dict(from_attributes=True)


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(0, ge=0)
    category_id: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=0, description="Target quantity, recorded as a stock movement")
    category_id: Optional[str] = None


class ProductOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    quantity: int
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = dict(from_attributes=True)


class ProductPage(BaseModel):
    items: List[ProductOut]
    meta: PagingMeta


__all__ = [
    "CategoryIn",
    "CategoryOut",
    "ProductCreate",
    "ProductUpdate",
    "ProductOut",
    "ProductPage",
]
