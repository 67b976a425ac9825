"""Centralised construction of problem+json payloads.

Route modules import these helpers instead of embedding titles, statuses and
error codes as string literals. Every payload carries a stable ``code`` that
clients can branch on.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse

PROBLEM_MEDIA_TYPE = "application/problem+json"

VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_ID = "INVALID_ID"
DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
DOCUMENT_TYPE_NOT_FOUND = "DOCUMENT_TYPE_NOT_FOUND"
DOCUMENT_CODE_DUPLICATE = "DOCUMENT_CODE_DUPLICATE"
DOCUMENT_TYPE_NAME_DUPLICATE = "DOCUMENT_TYPE_NAME_DUPLICATE"
STORAGE_FAILURE = "STORAGE_FAILURE"
INTERNAL_ERROR = "INTERNAL_ERROR"

logger = logging.getLogger(__name__)


def _problem(title: str, status: int, detail: str, code: str, **extra: Any) -> Dict[str, Any]:
    problem: Dict[str, Any] = {"title": title, "status": status, "detail": detail, "code": code}
    problem.update(extra)
    logger.info("error_handler.handle", extra={"problem_code": code, "status": status})
    return problem


def problem_validation(detail: str, errors: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """400 for malformed bodies or query values; ``errors`` carries field-level detail."""
    return _problem("Bad Request", 400, detail, VALIDATION_ERROR, errors=list(errors or []))


def problem_invalid_id(entity: str) -> Dict[str, Any]:
    return _problem("Bad Request", 400, f"Invalid {entity} ID", INVALID_ID)


def problem_document_not_found(missing: Optional[List[int]] = None) -> Dict[str, Any]:
    extra = {"missing_ids": missing} if missing else {}
    return _problem("Not Found", 404, "Document not found", DOCUMENT_NOT_FOUND, **extra)


def problem_document_type_not_found(missing: Optional[List[int]] = None) -> Dict[str, Any]:
    extra = {"missing_ids": missing} if missing else {}
    return _problem("Not Found", 404, "Document type not found", DOCUMENT_TYPE_NOT_FOUND, **extra)


def problem_duplicate_code(code: str) -> Dict[str, Any]:
    return _problem(
        "Bad Request",
        400,
        "Document code already exists. Please use a unique document code.",
        DOCUMENT_CODE_DUPLICATE,
        value=code,
    )


def problem_duplicate_type_name(name: str) -> Dict[str, Any]:
    return _problem(
        "Bad Request",
        400,
        "Document type name already exists.",
        DOCUMENT_TYPE_NAME_DUPLICATE,
        value=name,
    )


def problem_storage_failure(detail: str) -> Dict[str, Any]:
    return _problem("Internal Server Error", 500, detail, STORAGE_FAILURE)


def problem_internal_error() -> Dict[str, Any]:
    return _problem("Internal Server Error", 500, "Unexpected server error", INTERNAL_ERROR)


def problem_response(problem: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(problem, status_code=int(problem["status"]), media_type=PROBLEM_MEDIA_TYPE)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "VALIDATION_ERROR",
    "INVALID_ID",
    "DOCUMENT_NOT_FOUND",
    "DOCUMENT_TYPE_NOT_FOUND",
    "DOCUMENT_CODE_DUPLICATE",
    "DOCUMENT_TYPE_NAME_DUPLICATE",
    "STORAGE_FAILURE",
    "INTERNAL_ERROR",
    "problem_validation",
    "problem_invalid_id",
    "problem_document_not_found",
    "problem_document_type_not_found",
    "problem_duplicate_code",
    "problem_duplicate_type_name",
    "problem_storage_failure",
    "problem_internal_error",
    "problem_response",
]
