"""Pydantic models for document type (navigation tab) payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tmf_catalog.models.document import SortOrderValue


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class DocumentTypeCreate(_CamelModel):
    name: str = Field(min_length=1, max_length=100)
    display_name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    sort_order: SortOrderValue = 0


class DocumentTypeUpdate(_CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    sort_order: Optional[SortOrderValue] = None

    @field_validator("name", "display_name", "sort_order", mode="before")
    @classmethod
    def _reject_null(cls, v):  # type: ignore[no-untyped-def]
        if v is None:
            raise ValueError("field cannot be null")
        return v

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class DocumentType(_CamelModel):
    id: int
    name: str
    display_name: str
    description: Optional[str] = None
    sort_order: int = 0
    created_at: Optional[datetime | str] = None
    updated_at: Optional[datetime | str] = None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


__all__ = ["DocumentTypeCreate", "DocumentTypeUpdate", "DocumentType"]
