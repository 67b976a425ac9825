"""Tab, search and status filtering of documents."""

from __future__ import annotations

import pytest

from tmf_catalog.logic.catalog_filter import (
    default_active_tab,
    filter_documents,
    find_orphaned_documents,
    parse_status_filter,
)

SOP = "Standardowe Procedury Operacyjne"
CRF = "Formularze CRF"

DOCS = [
    {"id": 1, "type": SOP, "status": "Aktualna", "sortOrder": 2, "title": "Monitoring", "code": "SOP-001",
     "userCode": None, "description": "Wizyty monitorujące"},
    {"id": 2, "type": SOP, "status": "Archiwalna", "sortOrder": 0, "title": "Archiwizacja", "code": "SOP-002",
     "userCode": "QA-77", "description": "Stara wersja"},
    {"id": 3, "type": CRF, "status": "Aktualna", "sortOrder": 0, "title": "Formularz AE", "code": "CRF-001",
     "userCode": None, "description": "Zdarzenia niepożądane"},
    {"id": 4, "type": SOP, "status": "Aktualna", "sortOrder": 1, "title": "Szkolenia", "code": "SOP-003",
     "userCode": None, "description": "Plan szkoleń"},
    {"id": 5, "type": CRF, "status": "Archiwalna", "sortOrder": 1, "title": "Formularz SAE", "code": "CRF-002",
     "userCode": None, "description": "Ciężkie zdarzenia"},
]


def test_exact_tab_match_then_current_status():
    in_tab = filter_documents(DOCS, SOP)
    assert {d["type"] for d in in_tab} == {SOP}
    assert [d["id"] for d in in_tab] == [2, 4, 1]
    current = filter_documents(DOCS, SOP, status_filter="current")
    assert [d["id"] for d in current] == [4, 1]
    assert all(d["status"] == "Aktualna" for d in current)


def test_archived_filter():
    assert [d["id"] for d in filter_documents(DOCS, CRF, status_filter="archived")] == [5]


def test_tab_match_is_exact_not_prefix():
    assert filter_documents(DOCS, "Standardowe") == []


@pytest.mark.parametrize(
    "term,expected",
    [
        ("monitor", [1]),
        ("qa-77", [2]),
        ("sop-00", [2, 4, 1]),
        ("PLAN", [4]),
        ("", [2, 4, 1]),
    ],
)
def test_search_is_case_insensitive_over_title_code_user_code_description(term, expected):
    assert [d["id"] for d in filter_documents(DOCS, SOP, term)] == expected


def test_none_tab_disables_tab_predicate():
    assert [d["id"] for d in filter_documents(DOCS, None, status_filter="current")] == [3, 4, 1]


def test_ties_keep_input_order():
    docs = [{"id": 9, "type": SOP, "status": "Aktualna"}, {"id": 8, "type": SOP, "status": "Aktualna", "sortOrder": 0}]
    assert [d["id"] for d in filter_documents(docs, SOP)] == [9, 8]


def test_unknown_status_filter_raises():
    with pytest.raises(ValueError):
        parse_status_filter("draft")
    assert parse_status_filter(None) == "all"
    assert parse_status_filter(" Current ") == "current"


def test_default_active_tab_is_lowest_sort_order():
    types = [
        {"id": 1, "displayName": "B", "sortOrder": 1},
        {"id": 2, "displayName": "A", "sortOrder": 0},
    ]
    assert default_active_tab(types) == "A"
    assert default_active_tab([]) is None


def test_find_orphaned_documents():
    types = [{"id": 1, "displayName": SOP}]
    assert [d["id"] for d in find_orphaned_documents(DOCS, types)] == [3, 5]
