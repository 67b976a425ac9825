"""Lightweight SQL migrations runner.

Applies ``.sql`` files in lexical order from a migrations directory. PostgreSQL
uses ``migrations/`` and SQLite uses ``sqlite_migrations/`` at the project
root. Applied filenames are journaled in a ``schema_migrations`` table of the
target database so each file runs once per database.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]

_JOURNAL_DDL = (
    "CREATE TABLE IF NOT EXISTS schema_migrations ("
    " filename VARCHAR(255) PRIMARY KEY,"
    " applied_at VARCHAR(40) NOT NULL)"
)


def default_migrations_dir(engine: Engine) -> Path:
    """Return the bundled migrations directory matching the engine dialect."""
    name = (engine.dialect.name or "").lower()
    folder = "sqlite_migrations" if "sqlite" in name else "migrations"
    return PROJECT_ROOT / folder


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        if "rollback" in p.name.lower():
            continue
        yield p


def _exec_sql_compat(conn: Connection, sql: str) -> None:
    """Execute SQL text, tolerating multi-statement files on SQLite.

    pysqlite refuses several statements in one execute() call, so SQLite
    scripts are split on ';' (comment-only and BEGIN/COMMIT segments are
    skipped since the runner already holds a transaction). Other dialects
    receive the script as-is.
    """
    name = (getattr(conn.dialect, "name", "") or "").lower()
    if "sqlite" not in name:
        conn.exec_driver_sql(sql)
        return
    for stmt in sql.split(";"):
        lines = [ln for ln in stmt.splitlines() if not ln.strip().startswith("--")]
        s = "\n".join(lines).strip()
        if not s:
            continue
        if s.upper() in {"BEGIN", "COMMIT", "END"}:
            continue
        conn.exec_driver_sql(s)


def _applied_filenames(conn: Connection) -> set[str]:
    rows = conn.execute(sql_text("SELECT filename FROM schema_migrations")).fetchall()
    return {str(r[0]) for r in rows}


def apply_migrations(engine: Engine, migrations_dir: str | os.PathLike[str] | None = None) -> list[str]:
    """Apply pending migrations and return the filenames applied by this call."""
    root = Path(migrations_dir) if migrations_dir is not None else default_migrations_dir(engine)
    if not root.exists():
        logger.warning("migrations directory missing path=%s", root)
        return []

    applied_now: list[str] = []
    with engine.begin() as conn:
        conn.exec_driver_sql(_JOURNAL_DDL)
        applied = _applied_filenames(conn)
        for sql_path in _iter_sql_files(root):
            fname = sql_path.name
            if fname in applied:
                continue
            sql = sql_path.read_text(encoding="utf-8")
            if not sql.strip():
                continue
            _exec_sql_compat(conn, sql)
            conn.execute(
                sql_text("INSERT INTO schema_migrations (filename, applied_at) VALUES (:f, :at)"),
                {
                    "f": fname,
                    # ISO-8601 UTC without fractional seconds
                    "at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
                },
            )
            applied_now.append(fname)
    if applied_now:
        logger.info("migrations.applied files=%s", applied_now)
    return applied_now


__all__ = ["apply_migrations", "default_migrations_dir", "PROJECT_ROOT"]
