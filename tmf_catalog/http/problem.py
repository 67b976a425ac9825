"""Problem+JSON exception handlers registered on the application.

Request validation failures become 400 responses with field-level ``errors``;
HTTPExceptions keep their status; anything unexpected is logged with its
traceback and surfaced as a generic 500.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Dict, List

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from tmf_catalog.logic.problem_factory import (
    problem_internal_error,
    problem_response,
    problem_storage_failure,
    problem_validation,
)

logger = logging.getLogger(__name__)


def summarize_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Reduce pydantic error dicts to JSON-safe ``{field, message, type}`` entries."""
    summary: List[Dict[str, Any]] = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        summary.append(
            {
                "field": ".".join(loc),
                "message": str(err.get("msg", "")),
                "type": str(err.get("type", "")),
            }
        )
    return summary


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(exc.detail, dict):
        body = dict(exc.detail)
    else:
        try:
            title = HTTPStatus(status).phrase
        except ValueError:
            title = "Error"
        body = {"title": title, "status": status, "detail": str(exc.detail or title), "code": "HTTP_ERROR"}
    headers = dict(exc.headers) if isinstance(getattr(exc, "headers", None), dict) else None
    return JSONResponse(body, status_code=status, media_type="application/problem+json", headers=headers)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    errors = summarize_errors(list(exc.errors()))
    logger.info(
        "request.validation_error method=%s path=%s errors=%s",
        request.method,
        request.url.path,
        len(errors),
    )
    return problem_response(problem_validation("Request validation failed", errors))


async def handle_storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:  # noqa: D401
    logger.error("storage_error method=%s path=%s", request.method, request.url.path, exc_info=exc)
    return problem_response(problem_storage_failure("Storage operation failed"))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error method=%s path=%s", request.method, request.url.path, exc_info=exc)
    return problem_response(problem_internal_error())


__all__ = [
    "summarize_errors",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_storage_error",
    "handle_unexpected_error",
]
