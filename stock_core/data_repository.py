"""Explicitly constructed data-access component wrapping the SQLAlchemy engine."""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql.elements import ClauseElement

from .database_url import get_database_url
from .settings import AppSettings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def create_db_engine(url: str, *, pool_size: int = 10, max_overflow: int = 20) -> Engine:
    """Build an engine with pool settings suited to the dialect."""

    kwargs: dict[str, Any] = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        # Worker threads share connections; in-memory databases need a single one.
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in {"sqlite://", "sqlite:///:memory:"} or "mode=memory" in url:
            kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(
            {
                "pool_size": max(1, pool_size),
                "max_overflow": max(0, max_overflow),
            }
        )
    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _normalize_statement(sql: str | ClauseElement) -> ClauseElement:
    if isinstance(sql, str):
        return text(sql)
    if isinstance(sql, ClauseElement):
        return sql
    raise TypeError("sql must be a string or SQLAlchemy ClauseElement")


class Database:
    """Owns the engine (and its pool) for the lifetime of the application."""

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_url(cls, url: str, **engine_kwargs: Any) -> "Database":
        return cls(create_db_engine(url, **engine_kwargs))

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "Database":
        url = settings.database_url or get_database_url()
        return cls.from_url(
            url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_pool_max_overflow,
        )

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def query_df(self, sql: str | ClauseElement, params: dict[str, Any] | None = None) -> pd.DataFrame:
        """Run a SELECT and return the rows as a DataFrame."""

        statement = _normalize_statement(sql)
        if params is not None and not isinstance(params, dict):
            raise TypeError("params must be a mapping when provided")

        with self.engine.connect() as conn:
            result = conn.execute(statement, params or {})
            columns = list(result.keys())
            rows = result.fetchall()

        if not rows:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame([tuple(row) for row in rows], columns=columns)

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def dispose(self) -> None:
        logger.info("Disposing database engine (%s)", self.dialect_name)
        self.engine.dispose()


__all__ = ["Database", "create_db_engine"]
