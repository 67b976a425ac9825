"""HTTP client for the catalog API and the two reorder sessions built on it.

``CatalogClient`` wraps an ``httpx.Client``; FastAPI's ``TestClient`` is an
``httpx.Client`` too, so the same code drives a live server or an in-process
app. Non-2xx responses raise ``CatalogApiError`` carrying the problem+json
body.

``DocumentListView`` applies each drag-and-drop move to the store right away.
``DocumentTypeSortManager`` stages moves and writes them only on ``save()``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from tmf_catalog.logic.catalog_filter import filter_documents
from tmf_catalog.logic.order_sequences import (
    FlushResult,
    PendingReorder,
    SortOrderUpdate,
    flush_updates,
    plan_move,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"


class CatalogApiError(Exception):
    """Non-2xx answer from the catalog API."""

    def __init__(self, status: int, problem: Dict[str, Any]) -> None:
        detail = problem.get("detail") or problem.get("title") or "request failed"
        super().__init__(f"{status}: {detail}")
        self.status = status
        self.problem = problem

    @property
    def code(self) -> Optional[str]:
        return self.problem.get("code")


class CatalogClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        http: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_http = http is None
        self._http = http if http is not None else httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "CatalogClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = self._http.request(method, path, **kwargs)
        if resp.status_code >= 400:
            try:
                problem = resp.json()
            except ValueError:
                problem = {"title": resp.reason_phrase, "status": resp.status_code, "detail": resp.text}
            if not isinstance(problem, dict):
                problem = {"status": resp.status_code, "detail": str(problem)}
            logger.info(
                "catalog_client.error method=%s path=%s status=%s code=%s",
                method,
                path,
                resp.status_code,
                problem.get("code"),
            )
            raise CatalogApiError(resp.status_code, problem)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # Documents

    def list_documents(
        self,
        doc_type: Optional[str] = None,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {k: v for k, v in (("type", doc_type), ("search", search), ("status", status)) if v is not None}
        return self._request("GET", "/api/documents", params=params or None)

    def list_orphaned_documents(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/documents/orphans")

    def get_document(self, document_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/api/documents/{document_id}")

    def create_document(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/documents", json=payload)

    def update_document(self, document_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", f"/api/documents/{document_id}", json=changes)

    def delete_document(self, document_id: int) -> None:
        self._request("DELETE", f"/api/documents/{document_id}")

    def reorder_documents(self, updates: Iterable[SortOrderUpdate]) -> List[Dict[str, Any]]:
        items = [u.to_wire() for u in updates]
        return self._request("PUT", "/api/documents/order", json={"items": items})

    # Document types

    def list_document_types(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/document-types")

    def get_document_type(self, type_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/api/document-types/{type_id}")

    def create_document_type(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/document-types", json=payload)

    def update_document_type(self, type_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", f"/api/document-types/{type_id}", json=changes)

    def delete_document_type(self, type_id: int) -> None:
        self._request("DELETE", f"/api/document-types/{type_id}")

    def reorder_document_types(self, updates: Iterable[SortOrderUpdate]) -> List[Dict[str, Any]]:
        items = [u.to_wire() for u in updates]
        return self._request("PUT", "/api/document-types/order", json={"items": items})


class DocumentListView:
    """The documents visible under one tab, reordered in place.

    Every move is persisted immediately. By default the changed ``sortOrder``
    values travel in one batch request that the server applies atomically;
    with ``atomic=False`` each changed document gets its own PATCH and a
    failure leaves the earlier writes in place.
    """

    def __init__(
        self,
        client: CatalogClient,
        tab: Optional[str],
        search_term: str = "",
        status_filter: str = "all",
    ) -> None:
        self.client = client
        self.tab = tab
        self.search_term = search_term
        self.status_filter = status_filter
        self.items: List[Dict[str, Any]] = []

    def refresh(self) -> List[Dict[str, Any]]:
        documents = self.client.list_documents()
        self.items = [dict(d) for d in filter_documents(documents, self.tab, self.search_term, self.status_filter)]
        return self.items

    def move(self, source: int, destination: Optional[int], *, atomic: bool = True) -> FlushResult:
        plan = plan_move(self.items, source, destination)
        if plan.is_noop:
            return FlushResult()
        if atomic:
            result = self._write_batch(plan.updates)
        else:
            result = flush_updates(
                plan.updates,
                lambda doc_id, order: self.client.update_document(doc_id, {"sortOrder": order}),
            )
        self.refresh()
        return result

    def _write_batch(self, updates: Iterable[SortOrderUpdate]) -> FlushResult:
        updates = list(updates)
        result = FlushResult()
        try:
            self.client.reorder_documents(updates)
        except (CatalogApiError, httpx.HTTPError) as exc:
            logger.warning("documents.reorder.batch_failed count=%s error=%s", len(updates), exc)
            for u in updates:
                result.failed.append(u.id)
                result.errors[u.id] = str(exc)
            return result
        result.succeeded.extend(u.id for u in updates)
        return result


class DocumentTypeSortManager:
    """Staged reorder of the navigation tabs.

    Moves only change the local arrangement until ``save()`` sends one PATCH
    per changed type. ``reset()`` goes back to the last fetched order without
    touching the server.
    """

    def __init__(self, client: CatalogClient) -> None:
        self.client = client
        self._pending = PendingReorder.from_fetched(())

    def load(self) -> List[Dict[str, Any]]:
        self._pending = PendingReorder.from_fetched(self.client.list_document_types())
        return self.items

    @property
    def items(self) -> List[Dict[str, Any]]:
        return [dict(t) for t in self._pending.arranged]

    @property
    def has_changes(self) -> bool:
        return self._pending.has_changes

    def stage_move(self, source: int, destination: Optional[int]) -> List[Dict[str, Any]]:
        self._pending = self._pending.stage_move(source, destination)
        return self.items

    def pending_updates(self) -> List[SortOrderUpdate]:
        return self._pending.pending_updates()

    def reset(self) -> List[Dict[str, Any]]:
        self._pending = self._pending.reset()
        return self.items

    def save(self) -> FlushResult:
        if not self._pending.has_changes:
            return FlushResult()
        updates = self._pending.pending_updates()
        result = flush_updates(
            updates,
            lambda type_id, order: self.client.update_document_type(type_id, {"sortOrder": order}),
        )
        self._pending = self._pending.rebase(self.client.list_document_types())
        return result


__all__ = [
    "CatalogApiError",
    "CatalogClient",
    "DocumentListView",
    "DocumentTypeSortManager",
]
