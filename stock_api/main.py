"""FastAPI application exposing the stock management features."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from stock_api.api import auth as auth_router
from stock_api.api import categories as categories_router
from stock_api.api import products as products_router
from stock_api.api import stock_movements as stock_movements_router
from stock_api.api import users as users_router
from stock_api.dependencies.security import build_jwt_config, get_current_user
from stock_api.settings import Settings
from stock_core.data_repository import Database
from stock_core.errors import StorageFailure
from stock_core.schema import ensure_schema

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StorageFailure)
    async def storage_failure_handler(request: Request, exc: StorageFailure):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Storage failure, the operation was not applied"},
        )


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Build the application; the database engine is created here and disposed on shutdown."""

    settings = settings or Settings.load()
    _configure_logging(settings.log_level)
    owns_database = database is None
    database = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.auto_create_schema:
            ensure_schema(database.engine)
        yield
        if owns_database:
            database.dispose()

    app = FastAPI(
        title="AK Store API",
        version="1.0.0",
        description="Products, categories and stock movements for the AK Store inventory.",
        openapi_tags=[
            {"name": "auth", "description": "Registration, login and tokens"},
            {"name": "catalog", "description": "Products and categories"},
            {"name": "stock", "description": "Stock movements and adjustments"},
            {"name": "users", "description": "User accounts"},
        ],
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.jwt = build_jwt_config(settings)

    allowed_origins = settings.cors_allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials="*" not in allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_exception_handlers(app)

    api_router = APIRouter(prefix="/api")
    api_router.include_router(auth_router.router)

    # Every business route requires an authenticated user.
    secured = [Depends(get_current_user)]
    api_router.include_router(products_router.router, dependencies=secured)
    api_router.include_router(categories_router.router, dependencies=secured)
    api_router.include_router(stock_movements_router.router, dependencies=secured)
    api_router.include_router(users_router.router, dependencies=secured)
    app.include_router(api_router)

    @app.get("/")
    def index() -> dict[str, str]:
        return {"message": "AK Store API is running"}

    @app.get("/health")
    def healthcheck():
        try:
            database.ping()
        except SQLAlchemyError:
            logger.warning("Health check: database unreachable", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "degraded", "database": "unavailable"},
            )
        return {"status": "ok", "database": "ok"}

    return app


app = create_app()
