"""Small request-level validation helpers shared by route modules."""

from __future__ import annotations

from typing import Optional

# Postgres INTEGER upper bound; larger ids cannot exist in either table.
_MAX_ID = 2_147_483_647


def parse_entity_id(raw: str | None) -> Optional[int]:
    """Parse a path id made only of ASCII digits; None when malformed.

    Signs, whitespace, decimals and non-ASCII digits are rejected, as are
    values beyond the INTEGER column range.
    """
    token = raw or ""
    if not token.isascii() or not token.isdigit():
        return None
    value = int(token)
    if value > _MAX_ID:
        return None
    return value


__all__ = ["parse_entity_id"]
