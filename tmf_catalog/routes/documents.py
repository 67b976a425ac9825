"""Document catalog endpoints.

CRUD over ``documents`` plus the list filters, the orphan report and the
transactional batch reorder. Every failure is answered with problem+json.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query, Request, Response
from sqlalchemy.exc import SQLAlchemyError

from tmf_catalog.logic.catalog_filter import filter_documents, find_orphaned_documents, parse_status_filter
from tmf_catalog.logic.documents_write import prepare_new_document
from tmf_catalog.logic.errors import DuplicateDocumentCodeError, UnknownEntityError
from tmf_catalog.logic.problem_factory import (
    problem_document_not_found,
    problem_duplicate_code,
    problem_invalid_id,
    problem_response,
    problem_storage_failure,
    problem_validation,
)
from tmf_catalog.logic.repository_document_types import list_document_types
from tmf_catalog.logic.repository_documents import (
    apply_sort_orders as repo_apply_sort_orders,
    create_document as repo_create_document,
    delete_document as repo_delete_document,
    get_document as repo_get_document,
    list_documents as repo_list_documents,
    update_document as repo_update_document,
)
from tmf_catalog.logic.validation import parse_entity_id
from tmf_catalog.models.document import Document, DocumentCreate, DocumentUpdate, SortOrderBatch
from tmf_catalog.models.document_type import DocumentType


router = APIRouter()
logger = logging.getLogger(__name__)


def _wire(row: Dict[str, Any]) -> Dict[str, Any]:
    return Document.model_validate(row).to_wire()


def _storage_failure(detail: str, exc: SQLAlchemyError):  # type: ignore[no-untyped-def]
    logger.error("documents.storage_failure detail=%s", detail, exc_info=exc)
    return problem_response(problem_storage_failure(detail))


@router.get(
    "/documents",
    summary="List documents, optionally filtered by type, search term and status",
    operation_id="listDocuments",
    tags=["Documents"],
)
def list_documents(
    doc_type: Optional[str] = Query(None, alias="type"),
    search: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
):
    try:
        status_key = parse_status_filter(status_filter)
    except ValueError as exc:
        return problem_response(
            problem_validation(
                "Invalid status filter",
                [{"field": "status", "message": str(exc), "type": "value_error"}],
            )
        )
    try:
        rows = repo_list_documents()
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to fetch documents", exc)
    documents: List[Dict[str, Any]] = [_wire(r) for r in rows]
    if doc_type is None and not search and status_filter is None:
        return documents
    return filter_documents(documents, doc_type, search or "", status_key)


@router.get(
    "/documents/orphans",
    summary="List documents whose type matches no document type display name",
    operation_id="listOrphanedDocuments",
    tags=["Documents"],
)
def list_orphaned_documents():
    try:
        documents = [_wire(r) for r in repo_list_documents()]
        types = [DocumentType.model_validate(r).to_wire() for r in list_document_types()]
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to fetch documents", exc)
    return find_orphaned_documents(documents, types)


@router.put(
    "/documents/order",
    summary="Persist several document sort orders in one transaction",
    operation_id="reorderDocuments",
    tags=["Documents"],
)
def reorder_documents(batch: SortOrderBatch):
    proposed = {item.id: item.sort_order for item in batch.items}
    try:
        rows = repo_apply_sort_orders(proposed)
    except UnknownEntityError as exc:
        return problem_response(problem_document_not_found(exc.missing_ids))
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to reorder documents", exc)
    return [_wire(r) for r in rows]


@router.get(
    "/documents/{document_id}",
    summary="Get a single document",
    operation_id="getDocument",
    tags=["Documents"],
)
def get_document(document_id: str):
    doc_id = parse_entity_id(document_id)
    if doc_id is None:
        return problem_response(problem_invalid_id("document"))
    try:
        row = repo_get_document(doc_id)
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to fetch document", exc)
    if row is None:
        return problem_response(problem_document_not_found())
    return _wire(row)


@router.post(
    "/documents",
    summary="Create a document; a blank code is generated",
    operation_id="createDocument",
    tags=["Documents"],
    status_code=201,
)
def create_document(payload: DocumentCreate, request: Request, response: Response):
    values = prepare_new_document(payload, request.app.state.config.catalog)
    try:
        row = repo_create_document(values)
    except DuplicateDocumentCodeError as exc:
        return problem_response(problem_duplicate_code(exc.code))
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to create document", exc)
    response.headers["Location"] = f"/api/documents/{row['id']}"
    return _wire(row)


@router.patch(
    "/documents/{document_id}",
    summary="Partially update a document",
    operation_id="updateDocument",
    tags=["Documents"],
)
def update_document(document_id: str, payload: DocumentUpdate):
    doc_id = parse_entity_id(document_id)
    if doc_id is None:
        return problem_response(problem_invalid_id("document"))
    try:
        row = repo_update_document(doc_id, payload.changes())
    except DuplicateDocumentCodeError as exc:
        return problem_response(problem_duplicate_code(exc.code))
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to update document", exc)
    if row is None:
        return problem_response(problem_document_not_found())
    return _wire(row)


@router.delete(
    "/documents/{document_id}",
    summary="Delete a document",
    operation_id="deleteDocument",
    tags=["Documents"],
    status_code=204,
)
def delete_document(document_id: str):
    doc_id = parse_entity_id(document_id)
    if doc_id is None:
        return problem_response(problem_invalid_id("document"))
    try:
        deleted = repo_delete_document(doc_id)
    except SQLAlchemyError as exc:
        return _storage_failure("Failed to delete document", exc)
    if not deleted:
        return problem_response(problem_document_not_found())
    return Response(status_code=204)


__all__ = ["router"]
