from __future__ import annotations

import logging
import uuid
from time import perf_counter

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .logging_config import req_id_var

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Prefer client-provided ID to enable end-to-end correlation
        req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = req_id_var.set(req_id)
        t0 = perf_counter()
        try:
            response = await call_next(request)
        finally:
            req_id_var.reset(token)
        response.headers.setdefault("X-Request-ID", req_id)
        logger.debug(
            "request complete",
            extra={
                "meta": {
                    "req_id": req_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round((perf_counter() - t0) * 1000, 2),
                }
            },
        )
        return response
