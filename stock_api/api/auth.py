"""Authentication endpoints: register/login returning a JWT, plus the OAuth2 password flow."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from stock_api.dependencies.database import get_database
from stock_api.dependencies.security import JwtConfig, get_current_user, get_jwt_config, issue_user_token
from stock_api.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, TokenResponse, UserOut
from stock_core import user_service
from stock_core.data_repository import Database
from stock_core.errors import Conflict, InvalidInput
from stock_core.repositories import User

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid credentials"


def _invalid_credentials() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=INVALID_CREDENTIALS,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    db: Database = Depends(get_database),
    config: JwtConfig = Depends(get_jwt_config),
):
    try:
        user = user_service.register_user(
            db, name=payload.name, email=payload.email, password=payload.password
        )
    except InvalidInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Conflict as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return {"user": user, "token": issue_user_token(config, user)}


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    db: Database = Depends(get_database),
    config: JwtConfig = Depends(get_jwt_config),
):
    user = user_service.authenticate_user(db, payload.email, payload.password)
    if user is None:
        raise _invalid_credentials()
    return {"user": user, "token": issue_user_token(config, user)}


@router.post("/token", response_model=TokenResponse)
def issue_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Database = Depends(get_database),
    config: JwtConfig = Depends(get_jwt_config),
) -> TokenResponse:
    user = user_service.authenticate_user(db, form_data.username, form_data.password)
    if user is None:
        raise _invalid_credentials()
    return TokenResponse(
        access_token=issue_user_token(config, user),
        expires_in=config.expires_in_seconds,
        user=UserOut.model_validate(user),
    )


@router.get("/me", response_model=UserOut)
def read_current_user(user: User = Depends(get_current_user)):
    return user
