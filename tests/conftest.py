"""Shared pytest fixtures for service tests."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from stock_core.data_repository import Database
from stock_core.repositories import stock_movements as movement_repository
from stock_core.schema import ensure_schema


@pytest.fixture
def db() -> Database:
    """Fresh in-memory SQLite database with the full schema."""
    database = Database.from_url("sqlite://")
    ensure_schema(database.engine)
    yield database
    database.dispose()


@pytest.fixture
def file_db(tmp_path) -> Database:
    """File-backed SQLite database, usable from several threads at once."""
    database = Database.from_url(f"sqlite:///{tmp_path / 'stock.db'}")
    ensure_schema(database.engine)
    yield database
    database.dispose()


@pytest.fixture
def ticking_clock(monkeypatch):
    """Stamp each recorded movement one second after the previous one."""
    ticks = itertools.count()
    start = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
    monkeypatch.setattr(movement_repository, "utcnow", lambda: start + timedelta(seconds=next(ticks)))


@pytest.fixture
def frozen_clock(monkeypatch) -> datetime:
    """Stamp every recorded movement with the same instant."""
    instant = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
    monkeypatch.setattr(movement_repository, "utcnow", lambda: instant)
    return instant
