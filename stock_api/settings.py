"""API configuration built on top of stock_core.settings.AppSettings."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

from dotenv import load_dotenv

from stock_core.settings import AppSettings as CoreSettings

DEFAULT_CORS_ORIGINS = ["http://localhost:5173"]


@dataclass(frozen=True)
class Settings(CoreSettings):
    allow_insecure_jwt_default: bool = False

    @staticmethod
    def load() -> "Settings":
        load_dotenv()
        core = CoreSettings.load()
        allow_insecure = (
            os.getenv("ALLOW_INSECURE_JWT_DEFAULT", "").strip().lower() in {"1", "true", "yes", "on"}
            or core.app_env in {"development", "dev", "test"}
        )
        values = {field.name: getattr(core, field.name) for field in fields(core)}
        values["cors_allowed_origins"] = core.cors_allowed_origins or list(DEFAULT_CORS_ORIGINS)
        return Settings(**values, allow_insecure_jwt_default=allow_insecure)
