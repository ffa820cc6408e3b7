"""Centralised configuration for the data layer and the API, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _list_env(*names: str) -> list[str]:
    for name in names:
        raw = os.getenv(name)
        if raw:
            return [entry.strip() for entry in raw.split(",") if entry.strip()]
    return []


@dataclass(frozen=True)
class AppSettings:
    app_env: str = "development"
    database_url: str = ""
    db_pool_size: int = 10
    db_pool_max_overflow: int = 20
    cors_allowed_origins: list[str] = field(default_factory=list)
    jwt_secret_keys: list[str] = field(default_factory=list)
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 24 * 60
    auto_create_schema: bool = True
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.app_env in {"prod", "production", "staging"}

    @staticmethod
    def load() -> "AppSettings":
        app_env = os.getenv("APP_ENV", os.getenv("ENV", "development")).strip().lower()
        production = app_env in {"prod", "production", "staging"}
        return AppSettings(
            app_env=app_env,
            database_url=os.getenv("DATABASE_URL", "").strip(),
            db_pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
            db_pool_max_overflow=int(os.getenv("DB_POOL_MAX_OVERFLOW", "20")),
            cors_allowed_origins=_list_env("CORS_ALLOWED_ORIGINS"),
            jwt_secret_keys=_list_env("JWT_SECRET_KEYS", "JWT_SECRET_KEY", "JWT_SECRET"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_expire_minutes=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", str(24 * 60))),
            auto_create_schema=_bool_env("AUTO_CREATE_SCHEMA", default=not production),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        )
