"""Domain errors raised by repositories and mapped to problem+json by routes."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for recoverable catalog errors."""


class DuplicateDocumentCodeError(CatalogError):
    def __init__(self, code: str) -> None:
        super().__init__(f"document code already exists: {code}")
        self.code = code


class DuplicateDocumentTypeNameError(CatalogError):
    def __init__(self, name: str) -> None:
        super().__init__(f"document type name already exists: {name}")
        self.name = name


class UnknownEntityError(CatalogError, LookupError):
    """Raised inside a batch when one of the ids does not exist."""

    def __init__(self, entity: str, missing_ids: list[int]) -> None:
        super().__init__(f"{entity} not found: {missing_ids}")
        self.entity = entity
        self.missing_ids = list(missing_ids)


def is_unique_violation(exc: Exception, constraint: str, column: str) -> bool:
    """Return True when ``exc`` reports a breach of the named unique constraint.

    PostgreSQL drivers expose the constraint name on ``orig.diag``; SQLite only
    reports ``UNIQUE constraint failed: <table>.<column>`` in the message.
    """
    orig = getattr(exc, "orig", None) or exc
    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return str(name) == constraint
    message = str(orig)
    return constraint in message or ("UNIQUE constraint failed" in message and column in message)


__all__ = [
    "is_unique_violation",
    "CatalogError",
    "DuplicateDocumentCodeError",
    "DuplicateDocumentTypeNameError",
    "UnknownEntityError",
]
