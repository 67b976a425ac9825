"""Write helpers for document routes.

Keeps defaulting and normalisation out of route handlers: route modules hand
a validated payload over and receive the column dict to persist.
"""

from __future__ import annotations

from typing import Any, Dict

from tmf_catalog.config import CatalogConfig
from tmf_catalog.logic.code_generation import generate_document_code, needs_generated_code
from tmf_catalog.models.document import DocumentCreate


def prepare_new_document(payload: DocumentCreate, catalog: CatalogConfig) -> Dict[str, Any]:
    """Return the column values for an insert, generating ``code`` when blank."""
    values = payload.model_dump()
    if needs_generated_code(values.get("code")):
        values["code"] = generate_document_code(payload.type, prefix=catalog.code_prefix)
    else:
        values["code"] = str(values["code"]).strip()
    if payload.user_code is not None and not payload.user_code.strip():
        values["user_code"] = None
    if "color" not in payload.model_fields_set:
        values["color"] = catalog.default_color
    return values


__all__ = ["prepare_new_document"]
