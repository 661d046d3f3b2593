"""
DrawCalc Backend - Access Log Middleware
========================================

What:  One `drawcalc.access` line per request.
How:   Times the downstream call, then logs the outcome together with whatever
       the route left in `request.state.upload` (size and declared type of the
       drawing). The uploaded bytes themselves are never logged.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Example lines:
    POST /calculate 200 812.4ms rid=3fa2c1d0 drawing=48213B image/png
    POST /calculate 400 2.1ms rid=9b01e7aa
    GET /favicon.ico 200 0.3ms rid=1c2d3e4f

5xx → ERROR, 4xx → WARNING, otherwise INFO. /health is skipped.
"""

import logging
import time
from typing import Any, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from drawcalc.middleware.request_id import request_id_var

logger = logging.getLogger("drawcalc.access")

QUIET_PATHS = {"/health"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def format_access_line(fields: Dict[str, Any]) -> str:
    line = "{method} {path} {status} {duration_ms:.1f}ms rid={request_id}".format(**fields)
    if "upload_size" in fields:
        line += " drawing={upload_size}B {upload_type}".format(**fields)
    return line


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)

        fields: Dict[str, Any] = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        }
        # Set by the calculate route once the drawing has been read
        upload = getattr(request.state, "upload", None)
        if upload:
            fields["upload_size"] = upload.get("size")
            fields["upload_type"] = upload.get("content_type")

        logger.log(level_for_status(response.status_code), format_access_line(fields), extra=fields)
        return response
