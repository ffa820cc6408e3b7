"""Utilities to assemble the DATABASE_URL used by the data layer."""

from __future__ import annotations

import os
from urllib.parse import quote_plus


def _get_env(*names: str) -> str | None:
    """Return the first of ``names`` set to a non-empty string."""

    for name in names:
        value = os.getenv(name)
        if value is None:
            continue
        value = value.strip()
        if value:
            return value
    return None


def get_database_url() -> str:
    """Build a SQLAlchemy compatible DATABASE_URL.

    Priority order:

    1. ``DATABASE_URL`` (already complete connection string).
    2. Individual ``DB_*`` / ``POSTGRES_*`` environment variables.
    3. Local defaults.
    """

    explicit_url = _get_env("DATABASE_URL")
    if explicit_url:
        return explicit_url

    user = _get_env("DB_USER", "POSTGRES_USER") or "postgres"
    password = _get_env("DB_PASSWORD", "POSTGRES_PASSWORD")
    database = _get_env("DB_NAME", "POSTGRES_DB") or "ak_store"
    host = _get_env("DB_HOST", "POSTGRES_HOST") or "localhost"
    port = _get_env("DB_PORT", "POSTGRES_PORT") or "5432"

    user_part = quote_plus(user)
    if password is None:
        auth_part = user_part
    else:
        auth_part = f"{user_part}:{quote_plus(password)}"

    return f"postgresql+psycopg2://{auth_part}@{host}:{port}/{database}"


__all__ = ["get_database_url"]
