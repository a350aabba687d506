"""Request ID middleware and log correlation."""

import logging
import uuid
from collections.abc import Callable
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

_request_id: ContextVar[str] = ContextVar("request_id", default="-")


def get_request_id() -> str:
    """Request ID of the request being handled, or ``-``."""
    return _request_id.get()


class RequestIDLogFilter(logging.Filter):
    """Adds ``request_id`` to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an ID.

    The ID is taken from the X-Request-ID header or generated, stored on
    request state and in a context variable for log records, and echoed
    in the response headers.
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = _request_id.set(request_id)

        try:
            response = await call_next(request)
        finally:
            _request_id.reset(token)

        response.headers[self.HEADER_NAME] = request_id
        return response
