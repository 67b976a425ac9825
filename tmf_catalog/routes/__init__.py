"""APIRouter registration for the TMF document catalog."""

from __future__ import annotations

from fastapi import APIRouter

from tmf_catalog.routes.document_types import router as document_types_router
from tmf_catalog.routes.documents import router as documents_router

api_router = APIRouter()
api_router.include_router(documents_router, tags=["Documents"])
api_router.include_router(document_types_router, tags=["DocumentTypes"])

__all__ = ["api_router"]
