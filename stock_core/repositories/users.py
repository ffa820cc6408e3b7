"""
User Repository - Data access for the users table.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol, Sequence

import sqlalchemy as sa
from sqlalchemy.engine import Connection

from stock_core.schema import new_id, users, utcnow


@dataclass
class User:
    """User entity (never carries the password hash)."""

    id: str | None
    name: str
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserRepository(Protocol):
    """User repository interface."""

    def get_by_id(self, id: str) -> User | None:
        ...

    def get_credentials(self, email: str) -> tuple[User, str] | None:
        ...

    def list_all(self, *, limit: int = 100, offset: int = 0) -> Sequence[User]:
        ...

    def count(self) -> int:
        ...

    def add(self, user: User, password_hash: str) -> User:
        ...

    def update(self, id: str, changes: dict[str, Any]) -> bool:
        ...

    def delete(self, id: str) -> bool:
        ...


_PUBLIC_COLUMNS = (users.c.id, users.c.name, users.c.email, users.c.created_at, users.c.updated_at)
_UPDATABLE = frozenset({"name", "email", "password_hash"})


class SqlUserRepository:
    """SQLAlchemy implementation of UserRepository bound to one connection."""

    def __init__(self, connection: Connection):
        self._conn = connection

    def get_by_id(self, id: str) -> User | None:
        row = self._conn.execute(sa.select(*_PUBLIC_COLUMNS).where(users.c.id == id)).first()
        if row is None:
            return None
        return self._row_to_user(row._mapping)

    def get_credentials(self, email: str) -> tuple[User, str] | None:
        row = self._conn.execute(
            sa.select(*_PUBLIC_COLUMNS, users.c.password_hash).where(
                sa.func.lower(users.c.email) == email.lower()
            )
        ).first()
        if row is None:
            return None
        return self._row_to_user(row._mapping), str(row.password_hash)

    def list_all(self, *, limit: int = 100, offset: int = 0) -> Sequence[User]:
        rows = self._conn.execute(
            sa.select(*_PUBLIC_COLUMNS)
            .order_by(users.c.created_at.asc(), users.c.name.asc())
            .limit(limit)
            .offset(offset)
        ).fetchall()
        return [self._row_to_user(row._mapping) for row in rows]

    def count(self) -> int:
        return int(self._conn.execute(sa.select(sa.func.count()).select_from(users)).scalar() or 0)

    def add(self, user: User, password_hash: str) -> User:
        user.id = user.id or new_id()
        now = utcnow()
        self._conn.execute(
            sa.insert(users).values(
                id=user.id,
                name=user.name,
                email=user.email,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
        )
        user.created_at = now
        user.updated_at = now
        return user

    def update(self, id: str, changes: dict[str, Any]) -> bool:
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise ValueError(f"Columns not updatable here: {', '.join(sorted(unknown))}")
        result = self._conn.execute(
            sa.update(users).where(users.c.id == id).values(**changes, updated_at=utcnow())
        )
        return result.rowcount == 1

    def delete(self, id: str) -> bool:
        result = self._conn.execute(sa.delete(users).where(users.c.id == id))
        return result.rowcount == 1

    def _row_to_user(self, row: Any) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
