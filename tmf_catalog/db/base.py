"""SQLAlchemy engine and connection helpers.

The catalog targets PostgreSQL in production and SQLite for local development
and tests. No declarative models are defined here; repositories issue SQL
through ``sqlalchemy.text`` and this module only manages engine lifecycle.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from tmf_catalog.config import load_config

logger = logging.getLogger(__name__)


def _db_url() -> str:
    return load_config().database.dsn


# Module-level cached Engine so repositories share one pool
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    A different URL replaces the cached engine (tests switch databases this
    way). Without a URL the cached engine is returned as is; configuration is
    read only when no engine exists yet, or after ``reset_engine()``.
    In-memory SQLite URLs use a StaticPool so every session sees the same
    database.
    """
    global _ENGINE, _ENGINE_URL
    if url is None and _ENGINE is not None:
        return _ENGINE
    resolved_url = url or _db_url()

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        if _ENGINE is not None:
            _ENGINE.dispose()
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        if resolved_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in resolved_url:
                kwargs["poolclass"] = StaticPool
        _ENGINE = create_engine(resolved_url, **kwargs)
        if resolved_url.startswith("sqlite"):
            event.listen(_ENGINE, "connect", _enable_sqlite_foreign_keys)
        _ENGINE_URL = resolved_url
        logger.info("db.engine.created dialect=%s", _ENGINE.dialect.name)

    return _ENGINE


def reset_engine() -> None:
    """Dispose the cached engine; the next ``get_engine`` call rebuilds it."""
    global _ENGINE, _ENGINE_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _ENGINE_URL = None


@contextmanager
def transaction() -> Iterator[Connection]:
    """Yield a connection inside one transaction; roll back and log on error."""
    eng = get_engine()
    try:
        with eng.begin() as conn:
            yield conn
    except IntegrityError as exc:
        logger.info("db.transaction.integrity_error; rolled back: %s", exc.orig)
        raise
    except SQLAlchemyError:
        logger.error("DB transaction error; rolled back", exc_info=True)
        raise


__all__ = ["get_engine", "reset_engine", "transaction"]
