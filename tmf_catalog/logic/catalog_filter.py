"""Tab, search and status filtering of the document catalog.

Operates on wire-shaped document mappings. All predicates are ANDed and the
result is stably sorted by ``sortOrder`` so ties keep their input order.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from tmf_catalog.logic.order_sequences import sort_by_order
from tmf_catalog.models.document import STATUS_ARCHIVED, STATUS_CURRENT

STATUS_FILTERS = {
    "all": None,
    "current": STATUS_CURRENT,
    "archived": STATUS_ARCHIVED,
}

_SEARCH_FIELDS = ("title", "code", "userCode", "description")


def parse_status_filter(value: Optional[str]) -> str:
    """Normalise a status filter name; raises ValueError on unknown values."""
    key = (value or "all").strip().lower()
    if key not in STATUS_FILTERS:
        raise ValueError(f"status filter must be one of {sorted(STATUS_FILTERS)}")
    return key


def matches_tab(document: Mapping[str, Any], tab: Optional[str]) -> bool:
    return tab is None or document.get("type") == tab


def matches_search(document: Mapping[str, Any], search_term: Optional[str]) -> bool:
    if not search_term:
        return True
    needle = search_term.lower()
    for field_name in _SEARCH_FIELDS:
        value = document.get(field_name)
        if value and needle in str(value).lower():
            return True
    return False


def matches_status(document: Mapping[str, Any], status_filter: str) -> bool:
    wanted = STATUS_FILTERS[status_filter]
    return wanted is None or document.get("status") == wanted


def filter_documents(
    documents: Iterable[Mapping[str, Any]],
    tab: Optional[str],
    search_term: Optional[str] = "",
    status_filter: Optional[str] = "all",
) -> List[Mapping[str, Any]]:
    """Return the documents visible under one tab, search term and status filter.

    ``tab`` is compared with ``type`` by exact equality; ``None`` disables the
    tab predicate.
    """
    status_key = parse_status_filter(status_filter)
    visible = [
        doc
        for doc in documents
        if matches_tab(doc, tab) and matches_search(doc, search_term) and matches_status(doc, status_key)
    ]
    return sort_by_order(visible)


def default_active_tab(document_types: Iterable[Mapping[str, Any]]) -> Optional[str]:
    """Display name of the first type in tab order, or None when there are none."""
    ordered = sort_by_order(document_types)
    return ordered[0].get("displayName") if ordered else None


def find_orphaned_documents(
    documents: Iterable[Mapping[str, Any]],
    document_types: Iterable[Mapping[str, Any]],
) -> List[Mapping[str, Any]]:
    """Documents whose ``type`` matches no document type display name."""
    known = {t.get("displayName") for t in document_types}
    return [doc for doc in documents if doc.get("type") not in known]


__all__ = [
    "STATUS_FILTERS",
    "parse_status_filter",
    "matches_tab",
    "matches_search",
    "matches_status",
    "filter_documents",
    "default_active_tab",
    "find_orphaned_documents",
]
