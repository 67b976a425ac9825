"""Pydantic models for document payloads.

Wire names are camelCase (``userCode``, ``sortOrder``, ``googleDocsUrl``);
attributes are snake_case and map one-to-one onto the ``documents`` columns.
Unknown keys are ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tmf_catalog.config import DEFAULT_COLOR

STATUS_CURRENT = "Aktualna"
STATUS_ARCHIVED = "Archiwalna"
DocumentStatus = Literal["Aktualna", "Archiwalna"]

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

# INTEGER column range shared by both tables
INT_MIN = -2_147_483_648
INT_MAX = 2_147_483_647
SortOrderValue = Annotated[int, Field(ge=INT_MIN, le=INT_MAX)]
EntityId = Annotated[int, Field(ge=0, le=INT_MAX)]

# Fields PATCH may omit but never set to null.
_REQUIRED_ON_UPDATE = ("title", "code", "sort_order", "description", "version", "date", "status", "type")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class DocumentCreate(_CamelModel):
    title: str = Field(min_length=1, max_length=500)
    code: str = Field(default="", max_length=100)
    user_code: Optional[str] = Field(default=None, max_length=200)
    sort_order: SortOrderValue = 0
    description: str = Field(min_length=1)
    version: str = Field(min_length=1, max_length=50)
    date: str = Field(min_length=1, max_length=50)
    status: DocumentStatus
    type: str = Field(min_length=1, max_length=255)
    color: str = Field(default=DEFAULT_COLOR, pattern=HEX_COLOR_PATTERN)
    google_docs_url: str = ""

    @field_validator("code", "google_docs_url", mode="before")
    @classmethod
    def _null_as_empty(cls, v):  # type: ignore[no-untyped-def]
        return "" if v is None else v

    @field_validator("sort_order", mode="before")
    @classmethod
    def _null_sort_order(cls, v):  # type: ignore[no-untyped-def]
        return 0 if v is None else v


class DocumentUpdate(_CamelModel):
    """Partial update; only keys present in the request are written."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    code: Optional[str] = Field(default=None, min_length=1, max_length=100)
    user_code: Optional[str] = Field(default=None, max_length=200)
    sort_order: Optional[SortOrderValue] = None
    description: Optional[str] = Field(default=None, min_length=1)
    version: Optional[str] = Field(default=None, min_length=1, max_length=50)
    date: Optional[str] = Field(default=None, min_length=1, max_length=50)
    status: Optional[DocumentStatus] = None
    type: Optional[str] = Field(default=None, min_length=1, max_length=255)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    google_docs_url: Optional[str] = None

    @field_validator(*_REQUIRED_ON_UPDATE, mode="before")
    @classmethod
    def _reject_null(cls, v):  # type: ignore[no-untyped-def]
        if v is None:
            raise ValueError("field cannot be null")
        return v

    def changes(self) -> dict:
        """Return the explicitly provided fields keyed by column name."""
        return self.model_dump(exclude_unset=True)


class Document(_CamelModel):
    id: int
    title: str
    code: str
    user_code: Optional[str] = None
    sort_order: Optional[int] = 0
    description: str
    version: str
    date: str
    status: str
    type: str
    color: Optional[str] = DEFAULT_COLOR
    google_docs_url: Optional[str] = None
    created_at: Optional[datetime | str] = None
    updated_at: Optional[datetime | str] = None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class SortOrderItem(_CamelModel):
    id: EntityId
    sort_order: SortOrderValue


class SortOrderBatch(_CamelModel):
    """Body of the batch order endpoints: ``{"items": [{"id", "sortOrder"}]}``."""

    items: list[SortOrderItem] = Field(min_length=1)

    @field_validator("items")
    @classmethod
    def _unique_ids(cls, v: list[SortOrderItem]) -> list[SortOrderItem]:
        ids = [item.id for item in v]
        if len(ids) != len(set(ids)):
            raise ValueError("items must not repeat an id")
        return v


__all__ = [
    "STATUS_CURRENT",
    "STATUS_ARCHIVED",
    "DocumentStatus",
    "SortOrderValue",
    "EntityId",
    "DocumentCreate",
    "DocumentUpdate",
    "Document",
    "SortOrderItem",
    "SortOrderBatch",
]
