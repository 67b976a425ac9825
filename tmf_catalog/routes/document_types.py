"""Document type (navigation tab) endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Response
from sqlalchemy.exc import SQLAlchemyError

from tmf_catalog.logic.errors import DuplicateDocumentTypeNameError, UnknownEntityError
from tmf_catalog.logic.problem_factory import (
    problem_document_type_not_found,
    problem_duplicate_type_name,
    problem_invalid_id,
    problem_response,
    problem_storage_failure,
)
from tmf_catalog.logic.repository_document_types import (
    apply_sort_orders as repo_apply_sort_orders,
    create_document_type as repo_create_document_type,
    delete_document_type as repo_delete_document_type,
    get_document_type as repo_get_document_type,
    list_document_types as repo_list_document_types,
    update_document_type as repo_update_document_type,
)
from tmf_catalog.logic.validation import parse_entity_id
from tmf_catalog.models.document import SortOrderBatch
from tmf_catalog.models.document_type import DocumentType, DocumentTypeCreate, DocumentTypeUpdate


router = APIRouter()
logger = logging.getLogger(__name__)


def _wire(row: Dict[str, Any]) -> Dict[str, Any]:
    return DocumentType.model_validate(row).to_wire()


def _storage_failure(detail: str, exc: SQLAlchemyError):  # type: ignore[no-untyped-def]
    logger.error("document_types.storage_failure detail=%s", detail, exc_info=exc)
    return problem_response(problem_storage_failure(detail))


@router.get(
    "/document-types",
    summary="List document types in tab order",
    operation_id="listDocumentTypes",
    tags=["DocumentTypes"],
)
def list_document_types():
    try:
        rows = repo_list_document_types()
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to fetch document types", exc)
    return [_wire(r) for r in rows]


@router.put(
    "/document-types/order",
    summary="Persist several document type sort orders in one transaction",
    operation_id="reorderDocumentTypes",
    tags=["DocumentTypes"],
)
def reorder_document_types(batch: SortOrderBatch):
    proposed = {item.id: item.sort_order for item in batch.items}
    try:
        rows = repo_apply_sort_orders(proposed)
    except UnknownEntityError as exc:
        return problem_response(problem_document_type_not_found(exc.missing_ids))
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to reorder document types", exc)
    return [_wire(r) for r in rows]


@router.get(
    "/document-types/{type_id}",
    summary="Get a single document type",
    operation_id="getDocumentType",
    tags=["DocumentTypes"],
)
def get_document_type(type_id: str):
    parsed = parse_entity_id(type_id)
    if parsed is None:
        return problem_response(problem_invalid_id("document type"))
    try:
        row = repo_get_document_type(parsed)
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to fetch document type", exc)
    if row is None:
        return problem_response(problem_document_type_not_found())
    return _wire(row)


@router.post(
    "/document-types",
    summary="Create a document type",
    operation_id="createDocumentType",
    tags=["DocumentTypes"],
    status_code=201,
)
def create_document_type(payload: DocumentTypeCreate, response: Response):
    try:
        row = repo_create_document_type(payload.model_dump())
    except DuplicateDocumentTypeNameError as exc:
        return problem_response(problem_duplicate_type_name(exc.name))
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to create document type", exc)
    response.headers["Location"] = f"/api/document-types/{row['id']}"
    return _wire(row)


@router.patch(
    "/document-types/{type_id}",
    summary="Partially update a document type; a new display name re-points its documents",
    operation_id="updateDocumentType",
    tags=["DocumentTypes"],
)
def update_document_type(type_id: str, payload: DocumentTypeUpdate):
    parsed = parse_entity_id(type_id)
    if parsed is None:
        return problem_response(problem_invalid_id("document type"))
    try:
        row = repo_update_document_type(parsed, payload.changes())
    except DuplicateDocumentTypeNameError as exc:
        return problem_response(problem_duplicate_type_name(exc.name))
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to update document type", exc)
    if row is None:
        return problem_response(problem_document_type_not_found())
    return _wire(row)


@router.delete(
    "/document-types/{type_id}",
    summary="Delete a document type; its documents are left untouched",
    operation_id="deleteDocumentType",
    tags=["DocumentTypes"],
    status_code=204,
)
def delete_document_type(type_id: str):
    parsed = parse_entity_id(type_id)
    if parsed is None:
        return problem_response(problem_invalid_id("document type"))
    try:
        deleted = repo_delete_document_type(parsed)
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to delete document type", exc)
    if not deleted:
        return problem_response(problem_document_type_not_found())
    return Response(status_code=204)


__all__ = ["router"]
