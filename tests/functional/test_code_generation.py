"""System-generated document codes."""

from __future__ import annotations

import re

from tmf_catalog.config import CatalogConfig
from tmf_catalog.logic import code_generation
from tmf_catalog.logic.code_generation import generate_document_code, needs_generated_code, type_prefix
from tmf_catalog.logic.documents_write import prepare_new_document
from tmf_catalog.models.document import DocumentCreate

T_MS = 1_717_171_234_567


def _payload(**overrides):
    data = {
        "title": "Procedura",
        "description": "Opis",
        "version": "1.0",
        "date": "2024-06-01",
        "status": "Aktualna",
        "type": "SOP",
    }
    data.update(overrides)
    return DocumentCreate.model_validate(data)


def test_code_uses_prefix_type_and_last_six_millis_digits():
    assert generate_document_code("SOP", now_ms=T_MS) == "ARI-SOP-234567"


def test_type_prefix_is_first_three_chars_uppercased():
    assert type_prefix("Formularze CRF") == "FOR"
    assert type_prefix("ab") == "AB"


def test_short_epoch_keeps_all_digits():
    assert generate_document_code("sop", now_ms=42) == "ARI-SOP-42"


def test_blank_codes_need_generation():
    assert needs_generated_code(None)
    assert needs_generated_code("")
    assert needs_generated_code("   ")
    assert not needs_generated_code("X-1")


def test_prepare_new_document_generates_code_at_current_time(monkeypatch):
    monkeypatch.setattr(code_generation, "_epoch_millis", lambda: T_MS)
    values = prepare_new_document(_payload(code=""), CatalogConfig())
    assert values["code"] == "ARI-SOP-234567"
    assert re.fullmatch(r"ARI-SOP-\d{6}", values["code"])


def test_prepare_new_document_honours_configured_prefix(monkeypatch):
    monkeypatch.setattr(code_generation, "_epoch_millis", lambda: T_MS)
    values = prepare_new_document(_payload(), CatalogConfig(code_prefix="TMF"))
    assert values["code"] == "TMF-SOP-234567"


def test_prepare_new_document_keeps_explicit_code_and_normalises_blanks():
    values = prepare_new_document(_payload(code="  SOP-001 ", userCode="  "), CatalogConfig())
    assert values["code"] == "SOP-001"
    assert values["user_code"] is None


def test_prepare_new_document_applies_configured_default_color():
    values = prepare_new_document(_payload(code="A"), CatalogConfig(default_color="#112233"))
    assert values["color"] == "#112233"
    explicit = prepare_new_document(_payload(code="A", color="#ABCDEF"), CatalogConfig(default_color="#112233"))
    assert explicit["color"] == "#ABCDEF"
