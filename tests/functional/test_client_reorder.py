"""Reorder sessions driven through CatalogClient against the in-process app."""

from __future__ import annotations

import pytest

from tmf_catalog.client import CatalogApiError, CatalogClient, DocumentListView, DocumentTypeSortManager

SOP = "Standardowe Procedury Operacyjne"


class _Recorder:
    """Wraps a TestClient and records every request that goes through it."""

    def __init__(self, http):
        self._http = http
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs.get("json")))
        return self._http.request(method, url, **kwargs)

    def writes(self):
        return [c for c in self.calls if c[0] != "GET"]


@pytest.fixture()
def recorder(client):
    return _Recorder(client)


@pytest.fixture()
def api(recorder):
    return CatalogClient(http=recorder)  # type: ignore[arg-type]


def _three_docs(make_document):
    return [make_document(code=f"M-{i}", sortOrder=i, type=SOP) for i in range(3)]


def test_document_move_is_one_atomic_batch(api, recorder, make_document):
    docs = _three_docs(make_document)
    view = DocumentListView(api, SOP)
    view.refresh()
    recorder.calls.clear()
    result = view.move(0, 2)
    assert result.ok
    writes = recorder.writes()
    assert len(writes) == 1
    method, url, body = writes[0]
    assert (method, url) == ("PUT", "/api/documents/order")
    assert body == {
        "items": [
            {"id": docs[1]["id"], "sortOrder": 0},
            {"id": docs[2]["id"], "sortOrder": 1},
            {"id": docs[0]["id"], "sortOrder": 2},
        ]
    }
    assert [(d["id"], d["sortOrder"]) for d in view.items] == [
        (docs[1]["id"], 0),
        (docs[2]["id"], 1),
        (docs[0]["id"], 2),
    ]


def test_document_move_per_entity_patches(api, recorder, make_document):
    docs = _three_docs(make_document)
    view = DocumentListView(api, SOP)
    view.refresh()
    recorder.calls.clear()
    result = view.move(2, 0, atomic=False)
    assert sorted(result.succeeded) == sorted(d["id"] for d in docs)
    writes = recorder.writes()
    assert all(method == "PATCH" for method, _, _ in writes)
    assert [body for _, _, body in writes] == [{"sortOrder": 0}, {"sortOrder": 1}, {"sortOrder": 2}]
    assert [d["id"] for d in view.items] == [docs[2]["id"], docs[0]["id"], docs[1]["id"]]


@pytest.mark.parametrize("destination", [None, 1])
def test_document_noop_move_sends_nothing(api, recorder, make_document, destination):
    _three_docs(make_document)
    view = DocumentListView(api, SOP)
    view.refresh()
    recorder.calls.clear()
    result = view.move(1, destination)
    assert result.ok
    assert recorder.calls == []


def test_document_batch_failure_is_reported(api, make_document):
    _three_docs(make_document)
    view = DocumentListView(api, SOP)
    view.refresh()
    view.client.delete_document(view.items[0]["id"])
    result = view.move(0, 2)
    assert not result.ok
    assert len(result.failed) == 3


def test_type_reorder_reset_reverts_without_writes(api, recorder, seeded_types):
    manager = DocumentTypeSortManager(api)
    fetched = [t["id"] for t in manager.load()]
    recorder.calls.clear()
    staged = manager.stage_move(0, 3)
    assert [t["id"] for t in staged] != fetched
    assert manager.has_changes
    reverted = manager.reset()
    assert [t["id"] for t in reverted] == fetched
    assert not manager.has_changes
    assert recorder.calls == []
    assert [t["id"] for t in api.list_document_types()] == fetched


def test_type_reorder_save_patches_changed_types_only(api, recorder, seeded_types):
    manager = DocumentTypeSortManager(api)
    ids = [t["id"] for t in manager.load()]
    manager.stage_move(0, 1)
    recorder.calls.clear()
    result = manager.save()
    assert result.ok
    writes = recorder.writes()
    assert [(m, u) for m, u, _ in writes] == [
        ("PATCH", f"/api/document-types/{ids[1]}"),
        ("PATCH", f"/api/document-types/{ids[0]}"),
    ]
    assert [t["id"] for t in manager.items] == [ids[1], ids[0], ids[2], ids[3]]
    assert not manager.has_changes
    assert [t["id"] for t in api.list_document_types()] == [ids[1], ids[0], ids[2], ids[3]]


def test_type_save_without_changes_sends_nothing(api, recorder, seeded_types):
    manager = DocumentTypeSortManager(api)
    manager.load()
    recorder.calls.clear()
    assert manager.save().ok
    assert recorder.calls == []


def test_type_save_after_load_of_unnormalised_orders_sends_nothing(api, recorder):
    for name, order in (("a", 0), ("b", 0), ("c", 5)):
        api.create_document_type({"name": name, "displayName": name.upper(), "sortOrder": order})
    manager = DocumentTypeSortManager(api)
    manager.load()
    assert not manager.has_changes
    assert manager.pending_updates() == []
    recorder.calls.clear()
    assert manager.save().ok
    assert recorder.calls == []


def test_api_errors_carry_problem_details(api):
    with pytest.raises(CatalogApiError) as info:
        api.get_document(31337)
    assert info.value.status == 404
    assert info.value.code == "DOCUMENT_NOT_FOUND"
