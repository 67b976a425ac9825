"""Document data access helpers.

Rows are returned as plain dicts keyed by column name. Every write runs in its
own transaction, so a failed statement never leaves a partial change behind.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import bindparam
from sqlalchemy import text as sql_text
from sqlalchemy.exc import IntegrityError

from tmf_catalog.db.base import get_engine, transaction
from tmf_catalog.logic.errors import DuplicateDocumentCodeError, UnknownEntityError, is_unique_violation

logger = logging.getLogger(__name__)

CODE_CONSTRAINT = "documents_code_unique"

COLUMNS = (
    "id",
    "title",
    "code",
    "user_code",
    "sort_order",
    "description",
    "version",
    "date",
    "status",
    "type",
    "color",
    "google_docs_url",
    "created_at",
    "updated_at",
)
WRITABLE_COLUMNS = frozenset(COLUMNS) - {"id", "created_at", "updated_at"}

_SELECT = "SELECT " + ", ".join(COLUMNS) + " FROM documents"


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row(mapping: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    return dict(mapping) if mapping is not None else None


def list_documents() -> List[Dict[str, Any]]:
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(sql_text(_SELECT + " ORDER BY id ASC")).mappings().all()
    return [dict(r) for r in rows]


def get_document(document_id: int) -> Optional[Dict[str, Any]]:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(sql_text(_SELECT + " WHERE id = :id"), {"id": int(document_id)}).mappings().first()
    return _row(row)


def _raise_if_code_conflict(exc: IntegrityError, code: Optional[str]) -> None:
    if is_unique_violation(exc, CODE_CONSTRAINT, "documents.code"):
        raise DuplicateDocumentCodeError(str(code)) from exc


def create_document(values: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a document and return the stored row.

    Raises ``DuplicateDocumentCodeError`` when ``code`` is already taken.
    """
    data = {k: v for k, v in values.items() if k in WRITABLE_COLUMNS}
    now = _utcnow()
    data["created_at"] = now
    data["updated_at"] = now
    cols = sorted(data)
    stmt = sql_text(
        "INSERT INTO documents ("
        + ", ".join(cols)
        + ") VALUES ("
        + ", ".join(f":{c}" for c in cols)
        + ") RETURNING id"
    )
    try:
        with transaction() as conn:
            new_id = conn.execute(stmt, data).scalar_one()
            row = conn.execute(sql_text(_SELECT + " WHERE id = :id"), {"id": new_id}).mappings().first()
    except IntegrityError as exc:
        _raise_if_code_conflict(exc, data.get("code"))
        raise
    logger.info("documents.create", extra={"document_id": new_id, "code": data.get("code")})
    return dict(row)  # type: ignore[arg-type]


def update_document(document_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Apply a partial update and refresh ``updated_at``.

    Only keys present in ``changes`` are written. Returns the updated row, or
    None when the document does not exist.
    """
    data = {k: v for k, v in changes.items() if k in WRITABLE_COLUMNS}
    data["updated_at"] = _utcnow()
    assignments = ", ".join(f"{c} = :{c}" for c in sorted(data))
    params = dict(data)
    params["id"] = int(document_id)
    try:
        with transaction() as conn:
            result = conn.execute(sql_text(f"UPDATE documents SET {assignments} WHERE id = :id"), params)
            if result.rowcount == 0:
                return None
            row = conn.execute(sql_text(_SELECT + " WHERE id = :id"), {"id": int(document_id)}).mappings().first()
    except IntegrityError as exc:
        _raise_if_code_conflict(exc, data.get("code"))
        raise
    logger.info("documents.update", extra={"document_id": int(document_id), "fields": sorted(changes)})
    return _row(row)


def delete_document(document_id: int) -> bool:
    with transaction() as conn:
        result = conn.execute(sql_text("DELETE FROM documents WHERE id = :id"), {"id": int(document_id)})
    deleted = (result.rowcount or 0) > 0
    if deleted:
        logger.info("documents.delete", extra={"document_id": int(document_id)})
    return deleted


def apply_sort_orders(proposed: Dict[int, int]) -> List[Dict[str, Any]]:
    """Write several ``sort_order`` values in one transaction.

    Either every id is updated or none is: an unknown id raises
    ``UnknownEntityError`` and rolls the batch back. Returns the touched rows
    ordered by their new ``sort_order``.
    """
    ids = [int(k) for k in proposed]
    if not ids:
        return []
    now = _utcnow()
    with transaction() as conn:
        existing = conn.execute(
            sql_text("SELECT id FROM documents WHERE id IN :ids").bindparams(bindparam("ids", expanding=True)),
            {"ids": ids},
        ).scalars().all()
        missing = sorted(set(ids) - {int(i) for i in existing})
        if missing:
            raise UnknownEntityError("document", missing)
        for document_id, sort_order in proposed.items():
            conn.execute(
                sql_text("UPDATE documents SET sort_order = :ord, updated_at = :now WHERE id = :id"),
                {"ord": int(sort_order), "now": now, "id": int(document_id)},
            )
        rows = conn.execute(
            sql_text(_SELECT + " WHERE id IN :ids ORDER BY sort_order ASC, id ASC").bindparams(
                bindparam("ids", expanding=True)
            ),
            {"ids": ids},
        ).mappings().all()
    logger.info("documents.reorder", extra={"count": len(ids)})
    return [dict(r) for r in rows]


def retype_documents(conn, old_type: str, new_type: str) -> int:  # type: ignore[no-untyped-def]
    """Re-point documents from one type display name to another.

    Runs on the caller's connection so it shares the caller's transaction.
    Returns the number of documents changed.
    """
    result = conn.execute(
        sql_text("UPDATE documents SET type = :new, updated_at = :now WHERE type = :old"),
        {"new": new_type, "old": old_type, "now": _utcnow()},
    )
    return int(result.rowcount or 0)


def delete_all_documents() -> None:
    with transaction() as conn:
        conn.execute(sql_text("DELETE FROM documents"))


__all__ = [
    "list_documents",
    "get_document",
    "create_document",
    "update_document",
    "delete_document",
    "apply_sort_orders",
    "retype_documents",
    "delete_all_documents",
]
