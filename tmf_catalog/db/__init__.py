"""Database bootstrap utilities for the TMF catalog.

Exposes engine construction, a transaction helper and the SQL migrations
runner. Repositories receive plain dicts from here; no ORM models leak into
route handlers.
"""

from tmf_catalog.db.base import get_engine, reset_engine, transaction
from tmf_catalog.db.migrations_runner import apply_migrations, default_migrations_dir

__all__ = [
    "get_engine",
    "reset_engine",
    "transaction",
    "apply_migrations",
    "default_migrations_dir",
]
