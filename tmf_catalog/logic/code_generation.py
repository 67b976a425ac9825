"""System code generation for newly created documents.

Generated codes look like ``ARI-SOP-482913``: a configurable prefix, the first
three characters of the document type uppercased, and the last six digits of
the current epoch time in milliseconds. Codes are not unique by construction;
the store's unique constraint is the final arbiter.
"""

from __future__ import annotations

import time

DEFAULT_PREFIX = "ARI"


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def type_prefix(doc_type: str) -> str:
    return str(doc_type).upper()[:3]


def generate_document_code(doc_type: str, *, prefix: str = DEFAULT_PREFIX, now_ms: int | None = None) -> str:
    millis = _epoch_millis() if now_ms is None else int(now_ms)
    return f"{prefix}-{type_prefix(doc_type)}-{str(millis)[-6:]}"


def needs_generated_code(code: str | None) -> bool:
    return code is None or not str(code).strip()


__all__ = ["DEFAULT_PREFIX", "generate_document_code", "needs_generated_code", "type_prefix"]
