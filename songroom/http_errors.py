from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, TypedDict

from fastapi import HTTPException

from .logging_config import req_id_var


class ErrorEnvelope(TypedDict, total=False):
    code: str
    message: str
    hint: str | None
    meta: dict[str, Any]


def build_error(
    *,
    code: str,
    message: str,
    hint: str | None = None,
    meta: dict[str, Any] | None = None,
) -> ErrorEnvelope:
    """Standard error envelope used across the API.

    Keys:
      - code (machine-readable)
      - message (human-readable)
      - hint (actionable hint for UI)
      - meta (debuggable context; safe for clients)
    """
    body: ErrorEnvelope = {"code": code, "message": message}
    if hint is not None:
        body["hint"] = hint
    d = dict(meta or {})
    d.setdefault("req_id", req_id_var.get())
    d.setdefault(
        "timestamp",
        datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z"),
    )
    body["meta"] = d
    return body


def unauthorized(
    *,
    code: str = "unauthorized",
    message: str = "Not logged in",
    hint: str = "provide a valid bearer token or access_token cookie",
    headers: Mapping[str, str] | None = None,
) -> HTTPException:
    """Return a standardized 401 HTTPException with structured detail.

    Detail shape: {code, message, hint, meta}
    """
    hdrs = {"WWW-Authenticate": "Bearer", "X-Error-Code": code}
    if headers:
        hdrs.update(dict(headers))
    env = build_error(code=code, message=message, hint=hint, meta={"status_code": 401})
    return HTTPException(status_code=401, detail=env, headers=hdrs)
