"""Document type data access helpers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import bindparam
from sqlalchemy import text as sql_text
from sqlalchemy.exc import IntegrityError

from tmf_catalog.db.base import get_engine, transaction
from tmf_catalog.logic.errors import DuplicateDocumentTypeNameError, UnknownEntityError, is_unique_violation
from tmf_catalog.logic.repository_documents import retype_documents

logger = logging.getLogger(__name__)

NAME_CONSTRAINT = "document_types_name_unique"

COLUMNS = ("id", "name", "display_name", "description", "sort_order", "created_at", "updated_at")
WRITABLE_COLUMNS = frozenset({"name", "display_name", "description", "sort_order"})

_SELECT = "SELECT " + ", ".join(COLUMNS) + " FROM document_types"


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def list_document_types() -> List[Dict[str, Any]]:
    """Return all types in tab order (``sort_order``, then ``id``)."""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(sql_text(_SELECT + " ORDER BY sort_order ASC, id ASC")).mappings().all()
    return [dict(r) for r in rows]


def get_document_type(type_id: int) -> Optional[Dict[str, Any]]:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(sql_text(_SELECT + " WHERE id = :id"), {"id": int(type_id)}).mappings().first()
    return dict(row) if row is not None else None


def create_document_type(values: Dict[str, Any]) -> Dict[str, Any]:
    data = {k: v for k, v in values.items() if k in WRITABLE_COLUMNS}
    now = _utcnow()
    data["created_at"] = now
    data["updated_at"] = now
    cols = sorted(data)
    stmt = sql_text(
        "INSERT INTO document_types ("
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
        if is_unique_violation(exc, NAME_CONSTRAINT, "document_types.name"):
            raise DuplicateDocumentTypeNameError(str(data.get("name"))) from exc
        raise
    logger.info("document_types.create", extra={"type_id": new_id, "type_name": data.get("name")})
    return dict(row)  # type: ignore[arg-type]


def update_document_type(type_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Apply a partial update; returns None when the type does not exist.

    A changed ``display_name`` also re-points documents that referenced the
    old display name, inside the same transaction.
    """
    data = {k: v for k, v in changes.items() if k in WRITABLE_COLUMNS}
    data["updated_at"] = _utcnow()
    assignments = ", ".join(f"{c} = :{c}" for c in sorted(data))
    params = dict(data)
    params["id"] = int(type_id)
    retyped = 0
    try:
        with transaction() as conn:
            current = conn.execute(
                sql_text("SELECT display_name FROM document_types WHERE id = :id"), {"id": int(type_id)}
            ).first()
            if current is None:
                return None
            conn.execute(sql_text(f"UPDATE document_types SET {assignments} WHERE id = :id"), params)
            old_display = str(current[0])
            new_display = data.get("display_name")
            if new_display is not None and new_display != old_display:
                retyped = retype_documents(conn, old_display, str(new_display))
            row = conn.execute(sql_text(_SELECT + " WHERE id = :id"), {"id": int(type_id)}).mappings().first()
    except IntegrityError as exc:
        if is_unique_violation(exc, NAME_CONSTRAINT, "document_types.name"):
            raise DuplicateDocumentTypeNameError(str(data.get("name"))) from exc
        raise
    logger.info(
        "document_types.update",
        extra={"type_id": int(type_id), "fields": sorted(changes), "documents_retyped": retyped},
    )
    return dict(row) if row is not None else None


def delete_document_type(type_id: int) -> bool:
    """Delete a type. Documents that reference its display name are left as they are."""
    with transaction() as conn:
        result = conn.execute(sql_text("DELETE FROM document_types WHERE id = :id"), {"id": int(type_id)})
    deleted = (result.rowcount or 0) > 0
    if deleted:
        logger.info("document_types.delete", extra={"type_id": int(type_id)})
    return deleted


def apply_sort_orders(proposed: Dict[int, int]) -> List[Dict[str, Any]]:
    """Write several type ``sort_order`` values atomically; unknown ids roll back."""
    ids = [int(k) for k in proposed]
    if not ids:
        return []
    now = _utcnow()
    with transaction() as conn:
        existing = conn.execute(
            sql_text("SELECT id FROM document_types WHERE id IN :ids").bindparams(bindparam("ids", expanding=True)),
            {"ids": ids},
        ).scalars().all()
        missing = sorted(set(ids) - {int(i) for i in existing})
        if missing:
            raise UnknownEntityError("document type", missing)
        for type_id, sort_order in proposed.items():
            conn.execute(
                sql_text("UPDATE document_types SET sort_order = :ord, updated_at = :now WHERE id = :id"),
                {"ord": int(sort_order), "now": now, "id": int(type_id)},
            )
        rows = conn.execute(sql_text(_SELECT + " ORDER BY sort_order ASC, id ASC")).mappings().all()
    logger.info("document_types.reorder", extra={"count": len(ids)})
    return [dict(r) for r in rows]


def delete_all_document_types() -> None:
    with transaction() as conn:
        conn.execute(sql_text("DELETE FROM document_types"))


__all__ = [
    "list_document_types",
    "get_document_type",
    "create_document_type",
    "update_document_type",
    "delete_document_type",
    "apply_sort_orders",
    "delete_all_document_types",
]
