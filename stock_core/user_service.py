"""User accounts: registration, login checks and administration."""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .data_repository import Database
from .errors import Conflict, InvalidInput, StorageFailure, UserNotFound
from .repositories import PagedResult, SqlUnitOfWork, User

_PASSWORD_ITERATIONS = 390_000
_HASH_ALGO = "pbkdf2_sha256"
MIN_PASSWORD_LENGTH = 8
MAX_PAGE_SIZE = 100
DUPLICATE_EMAIL_MESSAGE = "Email already registered"

logger = logging.getLogger(__name__)


def _hash_password(password: str) -> str:
    """PBKDF2-SHA256 in ``algo$iterations$salt$digest`` form."""
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PASSWORD_ITERATIONS)
    return f"{_HASH_ALGO}${_PASSWORD_ITERATIONS}${salt.hex()}${digest.hex()}"


def _verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iter_str, salt_hex, digest_hex = encoded.split("$")
    except ValueError:
        return False

    if algorithm != _HASH_ALGO:
        return False

    try:
        iterations = int(iter_str)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(digest_hex)
    except ValueError:
        return False

    computed = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(computed, expected)


# Verified against when the email is unknown so both paths cost one PBKDF2 run.
_DUMMY_HASH = _hash_password(secrets.token_hex(16))


def _normalize_email(value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidInput("A valid email is required")
    cleaned = value.strip().lower()
    if "@" not in cleaned or cleaned.startswith("@") or cleaned.endswith("@"):
        raise InvalidInput("A valid email is required")
    return cleaned


def _clean_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput("Name is required")
    return value.strip()


def _check_password(value: Any) -> str:
    if not isinstance(value, str) or len(value) < MIN_PASSWORD_LENGTH:
        raise InvalidInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return value


def register_user(db: Database, *, name: Any, email: Any, password: Any) -> User:
    user = User(id=None, name=_clean_name(name), email=_normalize_email(email))
    password_hash = _hash_password(_check_password(password))

    try:
        with SqlUnitOfWork(db) as uow:
            if uow.users.get_credentials(user.email) is not None:
                raise Conflict(DUPLICATE_EMAIL_MESSAGE)
            user = uow.users.add(user, password_hash)
            uow.commit()
    except IntegrityError as exc:
        raise Conflict(DUPLICATE_EMAIL_MESSAGE) from exc
    except SQLAlchemyError as exc:
        logger.exception("User registration rolled back")
        raise StorageFailure("Could not register user") from exc

    logger.info("User %s registered", user.id)
    return user


def authenticate_user(db: Database, email: Any, password: Any) -> User | None:
    """Return the user when the credentials match, ``None`` otherwise."""

    if not isinstance(email, str) or not isinstance(password, str):
        return None
    try:
        with SqlUnitOfWork(db) as uow:
            found = uow.users.get_credentials(email.strip().lower())
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not load user") from exc

    if found is None:
        _verify_password(password, _DUMMY_HASH)
        logger.info("Login failed for unknown email")
        return None

    user, password_hash = found
    if not _verify_password(password, password_hash):
        logger.info("Login failed for user %s", user.id)
        return None
    return user


def get_user(db: Database, user_id: str) -> User:
    try:
        with SqlUnitOfWork(db) as uow:
            user = uow.users.get_by_id(user_id)
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not load user") from exc
    if user is None:
        raise UserNotFound(user_id)
    return user


def list_users(db: Database, *, page: int = 1, limit: int = 20) -> PagedResult[User]:
    page = max(1, int(page))
    limit = max(1, min(int(limit), MAX_PAGE_SIZE))
    try:
        with SqlUnitOfWork(db) as uow:
            items = list(uow.users.list_all(limit=limit, offset=(page - 1) * limit))
            total = uow.users.count()
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not list users") from exc
    return PagedResult(items=items, total=total, page=page, limit=limit)


def update_user(db: Database, user_id: str, changes: Mapping[str, Any]) -> User:
    cleaned: dict[str, Any] = {}
    if changes.get("name") is not None:
        cleaned["name"] = _clean_name(changes["name"])
    if changes.get("email") is not None:
        cleaned["email"] = _normalize_email(changes["email"])
    if changes.get("password") is not None:
        cleaned["password_hash"] = _hash_password(_check_password(changes["password"]))

    try:
        with SqlUnitOfWork(db) as uow:
            if uow.users.get_by_id(user_id) is None:
                raise UserNotFound(user_id)
            if "email" in cleaned:
                existing = uow.users.get_credentials(cleaned["email"])
                if existing is not None and existing[0].id != user_id:
                    raise Conflict(DUPLICATE_EMAIL_MESSAGE)
            if cleaned:
                uow.users.update(user_id, cleaned)
            user = uow.users.get_by_id(user_id)
            uow.commit()
    except IntegrityError as exc:
        raise Conflict(DUPLICATE_EMAIL_MESSAGE) from exc
    except SQLAlchemyError as exc:
        logger.exception("Update of user %s rolled back", user_id)
        raise StorageFailure("Could not update user") from exc
    return user


def delete_user(db: Database, user_id: str) -> None:
    try:
        with SqlUnitOfWork(db) as uow:
            if not uow.users.delete(user_id):
                raise UserNotFound(user_id)
            uow.commit()
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not delete user") from exc
    logger.info("User %s deleted", user_id)


__all__ = [
    "register_user",
    "authenticate_user",
    "get_user",
    "list_users",
    "update_user",
    "delete_user",
]
