# app/middleware/request_logging.py
from __future__ import annotations

import logging
import time
import uuid
from typing import Iterable, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("app.request")


DEFAULT_IGNORED_PREFIXES: Tuple[str, ...] = (
    "/api/healthz",
    "/api/readyz",
    "/docs",
    "/redoc",
    "/openapi.json",
)


def _farm_of(request: Request) -> str:
    # compliance endpoints carry the farm in the query (?farm=...); toggle has it in the body
    return request.query_params.get("farm") or "-"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per request: method, path, farm, status, duration, trace_id.
    Adds X-Request-ID to every response. Health/docs endpoints are not logged.
    """

    def __init__(self, app, ignored_prefixes: Iterable[str] = DEFAULT_IGNORED_PREFIXES):
        super().__init__(app)
        self.ignored_prefixes = tuple(ignored_prefixes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        method = request.method.upper()

        trace_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.trace_id = trace_id

        skip = method == "OPTIONS" or any(path.startswith(p) for p in self.ignored_prefixes)
        farm = _farm_of(request)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            if not skip:
                logger.exception(
                    "request CRASH %s %s farm=%s dur_ms=%s trace_id=%s",
                    method,
                    path,
                    farm,
                    int((time.perf_counter() - start) * 1000),
                    trace_id,
                )
            raise

        response.headers["X-Request-ID"] = trace_id
        if skip:
            return response

        status = getattr(response, "status_code", 0)
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(
            level,
            "request %s %s farm=%s -> %s dur_ms=%s trace_id=%s",
            method,
            path,
            farm,
            status,
            int((time.perf_counter() - start) * 1000),
            trace_id,
        )
        return response
