from __future__ import annotations

"""Functional test bootstrap for the catalog API.

Points the application at a file-backed SQLite database before any
``tmf_catalog`` import, applies the SQLite migrations once per session and
empties both tables before every test.
"""

import os
import pathlib

import pytest

_ROOT = pathlib.Path(__file__).resolve().parents[2]
_DB_FILE = _ROOT / "tmp" / "functional_tests.db"
_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
if _DB_FILE.exists():
    _DB_FILE.unlink()

# Use a file-backed SQLite DB so every pooled connection sees the same data
os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
# Disable app startup auto-migrations; migrations are applied explicitly below
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"

DEFAULT_TYPES = [
    {"name": "sop", "displayName": "Standardowe Procedury Operacyjne", "sortOrder": 0},
    {"name": "protocols", "displayName": "Protokoły Badania", "sortOrder": 1},
    {"name": "forms", "displayName": "Formularze CRF", "sortOrder": 2},
    {"name": "regulatory", "displayName": "Dokumenty Regulacyjne", "sortOrder": 3},
]


@pytest.fixture(scope="session", autouse=True)
def functional_sqlite_bootstrap():
    """Session-level bootstrap: apply migrations once for the shared DB."""
    from tmf_catalog.db.base import get_engine
    from tmf_catalog.db.migrations_runner import apply_migrations

    engine = get_engine(os.environ["TEST_DATABASE_URL"])
    apply_migrations(engine, migrations_dir=str(_ROOT / "sqlite_migrations"))
    yield
    engine.dispose()


@pytest.fixture(autouse=True)
def clean_catalog(functional_sqlite_bootstrap):
    from tmf_catalog.logic.repository_document_types import delete_all_document_types
    from tmf_catalog.logic.repository_documents import delete_all_documents

    delete_all_documents()
    delete_all_document_types()
    yield


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient

    from tmf_catalog.main import create_app

    with TestClient(create_app()) as tc:
        yield tc


@pytest.fixture()
def seeded_types(client):
    """The four default tabs, created through the API."""
    created = []
    for payload in DEFAULT_TYPES:
        resp = client.post("/api/document-types", json=payload)
        assert resp.status_code == 201, resp.text
        created.append(resp.json())
    return created


@pytest.fixture()
def make_document(client):
    """Factory creating a document through the API with sensible defaults."""

    def _make(**overrides):
        payload = {
            "title": "Procedura monitorowania",
            "description": "Opis procedury",
            "version": "1.0",
            "date": "2024-01-15",
            "status": "Aktualna",
            "type": "Standardowe Procedury Operacyjne",
        }
        payload.update(overrides)
        resp = client.post("/api/documents", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
