"""FastAPI application package for the TMF document catalog.

Exposes the application factory. Cross-cutting middleware (request id, CORS)
and problem+json handlers are wired in ``tmf_catalog.main``; business logic
lives in ``tmf_catalog/logic/`` and route handlers in ``tmf_catalog/routes/``.
A small HTTP client for the same API is in ``tmf_catalog.client``.
"""

from __future__ import annotations

from tmf_catalog.main import create_app

__all__ = ["create_app"]
