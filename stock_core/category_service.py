"""Category CRUD."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .data_repository import Database
from .errors import CategoryNotFound, Conflict, InvalidInput, StorageFailure
from .repositories import Category, SqlUnitOfWork

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 100
DUPLICATE_NAME_MESSAGE = "Category name already exists"


def _clean_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput("Category name is required")
    cleaned = value.strip()
    if len(cleaned) > MAX_NAME_LENGTH:
        raise InvalidInput(f"Category name must be at most {MAX_NAME_LENGTH} characters")
    return cleaned


def list_categories(db: Database) -> list[Category]:
    try:
        with SqlUnitOfWork(db) as uow:
            return list(uow.categories.list_all())
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not list categories") from exc


def get_category(db: Database, category_id: str) -> Category:
    try:
        with SqlUnitOfWork(db) as uow:
            category = uow.categories.get_by_id(category_id)
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not load category") from exc
    if category is None:
        raise CategoryNotFound(category_id)
    return category


def create_category(db: Database, name: Any) -> Category:
    cleaned = _clean_name(name)
    try:
        with SqlUnitOfWork(db) as uow:
            category = uow.categories.add(Category(id=None, name=cleaned))
            uow.commit()
    except IntegrityError as exc:
        raise Conflict(DUPLICATE_NAME_MESSAGE) from exc
    except SQLAlchemyError as exc:
        logger.exception("Category creation rolled back")
        raise StorageFailure("Could not create category") from exc
    logger.info("Category %s created (%s)", category.id, category.name)
    return category


def rename_category(db: Database, category_id: str, name: Any) -> Category:
    cleaned = _clean_name(name)
    try:
        with SqlUnitOfWork(db) as uow:
            if not uow.categories.rename(category_id, cleaned):
                raise CategoryNotFound(category_id)
            category = uow.categories.get_by_id(category_id)
            uow.commit()
    except IntegrityError as exc:
        raise Conflict(DUPLICATE_NAME_MESSAGE) from exc
    except SQLAlchemyError as exc:
        logger.exception("Rename of category %s rolled back", category_id)
        raise StorageFailure("Could not update category") from exc
    return category


def delete_category(db: Database, category_id: str) -> None:
    """Delete a category; its products stay, uncategorised."""

    try:
        with SqlUnitOfWork(db) as uow:
            if not uow.categories.delete(category_id):
                raise CategoryNotFound(category_id)
            uow.commit()
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not delete category") from exc
    logger.info("Category %s deleted", category_id)


__all__ = [
    "list_categories",
    "get_category",
    "create_category",
    "rename_category",
    "delete_category",
]
