"""Product catalogue operations.

Quantities are never written directly here: a product starts at zero and its
initial or target quantity is recorded through ``stock_service`` in the same
transaction, so the non-negative invariant has a single owner.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from . import stock_service
from .data_repository import Database
from .errors import CategoryNotFound, InvalidInput, ProductNotFound, StorageFailure
from .repositories import MovementType, PagedResult, Product, SqlUnitOfWork

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255
MAX_PAGE_SIZE = 100
PRICE_QUANTUM = Decimal("0.01")
MAX_PRICE = Decimal("100000000")


def _clean_name(value: Any) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise InvalidInput("Product name is required")
    cleaned = value.strip()
    if len(cleaned) > MAX_NAME_LENGTH:
        raise InvalidInput(f"Product name must be at most {MAX_NAME_LENGTH} characters")
    return cleaned


def _clean_price(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        raise InvalidInput("Price is required")
    try:
        price = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInput("Price must be a number") from None
    if not price.is_finite():
        raise InvalidInput("Price must be a number")
    if price < 0:
        raise InvalidInput("Price must be 0 or more")
    # Numeric(10, 2) holds eight integer digits once rounded to cents.
    if price >= MAX_PRICE or price.quantize(PRICE_QUANTUM) >= MAX_PRICE:
        raise InvalidInput(f"Price must be less than {MAX_PRICE}")
    return price.quantize(PRICE_QUANTUM)


def _clean_quantity(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput("Quantity must be an integer")
    if value < 0:
        raise InvalidInput("Quantity must be 0 or more")
    if value > stock_service.MAX_QUANTITY:
        raise InvalidInput(f"Quantity must be at most {stock_service.MAX_QUANTITY}")
    return value


def _clean_description(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidInput("Description must be a string")
    return value.strip() or None


def _clean_category_id(value: Any) -> str | None:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def list_products(
    db: Database,
    *,
    search: str | None = None,
    category_id: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> PagedResult[Product]:
    page = max(1, int(page))
    limit = max(1, min(int(limit), MAX_PAGE_SIZE))
    offset = (page - 1) * limit
    search = (search or "").strip() or None

    try:
        with SqlUnitOfWork(db) as uow:
            items, total = uow.products.list_page(
                search=search,
                category_id=_clean_category_id(category_id),
                limit=limit,
                offset=offset,
            )
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not list products") from exc
    return PagedResult(items=list(items), total=total, page=page, limit=limit)


def get_product(db: Database, product_id: str) -> Product:
    try:
        with SqlUnitOfWork(db) as uow:
            product = uow.products.get_by_id(product_id)
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not load product") from exc
    if product is None:
        raise ProductNotFound(product_id)
    return product


def create_product(db: Database, payload: Mapping[str, Any]) -> Product:
    name = _clean_name(payload.get("name"))
    price = _clean_price(payload.get("price"))
    quantity = _clean_quantity(payload.get("quantity"))
    description = _clean_description(payload.get("description"))
    category_id = _clean_category_id(payload.get("category_id"))

    try:
        with SqlUnitOfWork(db) as uow:
            if category_id is not None and not uow.categories.exists(category_id):
                raise CategoryNotFound(category_id)
            product = uow.products.add(
                Product(
                    id=None,
                    name=name,
                    price=price,
                    quantity=0,
                    description=description,
                    category_id=category_id,
                )
            )
            if quantity > 0:
                stock_service.apply_movement(uow, product.id, MovementType.IN, quantity, "Initial stock")
            created = uow.products.get_by_id(product.id)
            uow.commit()
    except IntegrityError as exc:
        raise InvalidInput("Product violates a database constraint") from exc
    except SQLAlchemyError as exc:
        logger.exception("Product creation rolled back")
        raise StorageFailure("Could not create product") from exc

    logger.info("Product %s created (%s, qty %d)", created.id, created.name, created.quantity)
    return created


def update_product(db: Database, product_id: str, changes: Mapping[str, Any]) -> Product:
    """Apply a partial update; a ``quantity`` key is recorded as a stock adjustment."""

    cleaned: dict[str, Any] = {}
    if "name" in changes:
        cleaned["name"] = _clean_name(changes["name"])
    if "price" in changes:
        cleaned["price"] = _clean_price(changes["price"])
    if "description" in changes:
        cleaned["description"] = _clean_description(changes["description"])
    if "category_id" in changes:
        cleaned["category_id"] = _clean_category_id(changes["category_id"])

    target_quantity: int | None = None
    if changes.get("quantity") is not None:
        target_quantity = _clean_quantity(changes["quantity"])

    try:
        with SqlUnitOfWork(db) as uow:
            if uow.products.get_by_id(product_id) is None:
                raise ProductNotFound(product_id)
            category_id = cleaned.get("category_id")
            if category_id is not None and not uow.categories.exists(category_id):
                raise CategoryNotFound(category_id)
            if cleaned:
                uow.products.update(product_id, cleaned)
            if target_quantity is not None:
                stock_service.adjust_to_target(
                    uow, product_id, target_quantity, f"Quantity set to {target_quantity} on product update"
                )
            updated = uow.products.get_by_id(product_id)
            uow.commit()
    except IntegrityError as exc:
        raise InvalidInput("Product violates a database constraint") from exc
    except SQLAlchemyError as exc:
        logger.exception("Update of product %s rolled back", product_id)
        raise StorageFailure("Could not update product") from exc
    return updated


def delete_product(db: Database, product_id: str) -> None:
    """Delete a product; its movements go with it through the cascade."""

    try:
        with SqlUnitOfWork(db) as uow:
            deleted = uow.products.delete(product_id)
            if not deleted:
                raise ProductNotFound(product_id)
            uow.commit()
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not delete product") from exc
    logger.info("Product %s deleted", product_id)


__all__ = [
    "list_products",
    "get_product",
    "create_product",
    "update_product",
    "delete_product",
]
