"""Request logging middleware."""

import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("imagehost.access")


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """Logs status, latency, client, method, and path for each request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = (time.perf_counter() - start) * 1000

        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        client = request.client.host if request.client else "-"

        logger.info(
            f"{response.status_code} | {latency_ms:8.2f}ms | {client:>15} | "
            f"{request.method:<7} {path}"
        )

        return response
