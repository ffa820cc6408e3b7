from __future__ import annotations

from fastapi import Request

from stock_core.data_repository import Database


def get_database(request: Request) -> Database:
    """Return the Database built by the application factory."""

    return request.app.state.database
