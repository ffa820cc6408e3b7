"""JWT/OAuth2 utilities and reusable dependencies."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from stock_api.dependencies.database import get_database
from stock_api.settings import Settings
from stock_core import user_service
from stock_core.data_repository import Database
from stock_core.errors import UserNotFound
from stock_core.repositories import User

DEFAULT_SECRET = "change-me-in-prod-this-is-not-a-secret"
MIN_SECRET_LENGTH = 32

logger = logging.getLogger(__name__)


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")


@dataclass(frozen=True)
class JwtConfig:
    """Signing material for access tokens; the first key signs, all keys verify."""

    secret_keys: tuple[str, ...]
    algorithm: str
    expire_minutes: int

    @property
    def signing_key(self) -> str:
        return self.secret_keys[0]

    @property
    def expires_in_seconds(self) -> int:
        return self.expire_minutes * 60


def _load_secrets(settings: Settings) -> list[str]:
    secrets = list(settings.jwt_secret_keys)

    if not secrets:
        if settings.is_production and not settings.allow_insecure_jwt_default:
            raise RuntimeError("JWT_SECRET_KEY missing: refusing to start in a production environment")
        logger.warning("Using default JWT secret; set JWT_SECRET_KEY/JWT_SECRET_KEYS in production")
        secrets = [DEFAULT_SECRET]

    for value in secrets:
        if len(value) < MIN_SECRET_LENGTH:
            raise RuntimeError(f"JWT secret too short (<{MIN_SECRET_LENGTH} characters). Generate a stronger key.")
    return secrets


def build_jwt_config(settings: Settings) -> JwtConfig:
    return JwtConfig(
        secret_keys=tuple(_load_secrets(settings)),
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.jwt_expire_minutes,
    )


def get_jwt_config(request: Request) -> JwtConfig:
    return request.app.state.jwt


def create_access_token(
    config: JwtConfig, claims: dict[str, Any], expires_delta: timedelta | None = None
) -> str:
    """Serialize the provided claims into a signed JWT with rotation-friendly claims."""

    payload = claims.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.expire_minutes))
    payload.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(payload, config.signing_key, algorithm=config.algorithm)


def issue_user_token(config: JwtConfig, user: User) -> str:
    return create_access_token(config, {"sub": str(user.id), "email": user.email})


def decode_token(config: JwtConfig, token: str) -> dict[str, Any]:
    last_error: Exception | None = None
    for secret in config.secret_keys:
        try:
            return jwt.decode(token, secret, algorithms=[config.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token expired",
                headers={"WWW-Authenticate": "Bearer"},
            ) from exc
        except jwt.InvalidTokenError as exc:
            last_error = exc
            continue

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid token",
        headers={"WWW-Authenticate": "Bearer"},
    ) from last_error


def get_current_user(
    token: str = Depends(oauth2_scheme),
    config: JwtConfig = Depends(get_jwt_config),
    db: Database = Depends(get_database),
) -> User:
    payload = decode_token(config, token)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return user_service.get_user(db, str(user_id))
    except UserNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
