"""Application-level errors and standardized error handlers."""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_config import req_id_var

logger = logging.getLogger(__name__)

_STATUS_TO_CODE = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    422: "validation_error",
    429: "rate_limited",
    500: "internal_error",
    502: "bad_gateway",
    503: "service_unavailable",
    504: "timeout",
}


def json_error(
    code: str,
    message: str,
    status: int,
    meta: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a standardized JSON error response.

    Shape: {"code", "message", "meta"}. Lowercase codes for consistency.
    """
    return JSONResponse(
        {"code": code.lower(), "message": message, "meta": meta or {}},
        status_code=status,
        headers=headers,
    )


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render HTTPExceptions in the error contract shape.

    Details that are already an envelope (see ``http_errors.build_error``)
    pass through untouched.
    """
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        return JSONResponse(exc.detail, status_code=exc.status_code, headers=exc.headers)

    code = _STATUS_TO_CODE.get(exc.status_code, "http_error")
    return json_error(
        code=code,
        message=str(exc.detail),
        status=exc.status_code,
        meta={"req_id": req_id_var.get()},
        headers=exc.headers,
    )


async def global_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log and map unexpected exceptions to a 500."""
    logger.exception(
        "unhandled error",
        extra={
            "meta": {
                "path": request.url.path,
                "method": request.method,
                "error_type": type(exc).__name__,
            }
        },
    )
    return json_error(
        "internal_error",
        "Something went wrong",
        500,
        meta={"req_id": req_id_var.get()},
    )


def register_error_handlers(app) -> None:
    """Register standardized error handlers on the FastAPI app."""
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, global_error_handler)
