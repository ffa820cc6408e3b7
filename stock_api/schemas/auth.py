from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from stock_api.schemas.common import PagingMeta


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    created_at: Optional[datetime] = None

    model_config = dict(from_attributes=True)


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(BaseModel):
    user: UserOut
    token: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserOut


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserPage(BaseModel):
    items: List[UserOut]
    meta: PagingMeta


__all__ = [
    "UserOut",
    "RegisterRequest",
    "LoginRequest",
    "AuthResponse",
    "TokenResponse",
    "UserUpdate",
    "UserPage",
]
