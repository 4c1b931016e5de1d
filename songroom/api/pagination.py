"""Pagination utilities for offset/limit list endpoints.

Query values are parsed leniently: anything unparsable falls back to the
default, offsets never go negative and limits are capped per endpoint.
"""

from collections.abc import Callable

from fastapi import Query
from pydantic import BaseModel, Field


class OffsetParams(BaseModel):
    """Offset/limit pair handed to list endpoints."""

    offset: int = Field(default=0, ge=0)
    limit: int = Field(ge=1)


def _coerce_int(raw: str | None, default: int) -> int:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return default


def offset_pagination(
    *, default_limit: int, max_limit: int
) -> Callable[..., OffsetParams]:
    """Build a FastAPI dependency parsing ``offset``/``limit`` query params."""

    def _dependency(
        offset: str | None = Query(None, description="Index of the first item"),
        limit: str | None = Query(
            None, description=f"Items per page (default {default_limit}, max {max_limit})"
        ),
    ) -> OffsetParams:
        off = max(0, _coerce_int(offset, 0))
        lim = _coerce_int(limit, default_limit)
        if lim < 1:
            lim = default_limit
        return OffsetParams(offset=off, limit=min(lim, max_limit))

    return _dependency


# Pagination limits for specific endpoints: (default, max)
PLAYLIST_LIMITS = (20, 50)
TRACK_LIMITS = (50, 100)
