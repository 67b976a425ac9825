from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tmf_catalog.config import load_config
from tmf_catalog.db.base import get_engine
from tmf_catalog.db.migrations_runner import apply_migrations
from tmf_catalog.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_storage_error,
    handle_unexpected_error,
)
from tmf_catalog.http.request_id import RequestIdMiddleware
from tmf_catalog.logging_setup import configure_logging
from tmf_catalog.middleware.cors import apply_cors
from tmf_catalog.routes import api_router

logger = logging.getLogger(__name__)


def _health_check() -> Callable[[], dict]:
    def check() -> dict:
        try:
            with get_engine().connect() as conn:
                conn.execute(sql_text("SELECT 1")).scalar()
            return {"status": "ok", "db": True}
        except SQLAlchemyError as e:
            logger.error("Health DB check failed", exc_info=True)
            return {"status": "degraded", "db": False, "reason": str(e)}

    return check


def create_app() -> FastAPI:
    # Configure global logging before app instantiation so all modules emit
    configure_logging()
    config = load_config()

    app = FastAPI(title="TMF Document Catalog")
    app.state.config = config

    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_storage_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.add_middleware(RequestIdMiddleware)
    apply_cors(app, origins=config.api.cors_origins)

    # Apply migrations on startup to avoid import-time side effects
    @app.on_event("startup")
    def _apply_migrations() -> None:
        if not config.database.auto_migrate:
            logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
            return
        try:
            applied = apply_migrations(get_engine())
        except SQLAlchemyError:
            logger.error("Failed to apply migrations at startup", exc_info=True)
            raise
        logger.info("startup migrations applied count=%s", len(applied))

    app.include_router(api_router, prefix="/api")

    health_check = _health_check()

    @app.get("/health")
    def health():
        return health_check()

    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
# Run with: uvicorn tmf_catalog.main:create_app --factory
