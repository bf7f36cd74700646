"""Correlation ID middleware for tracing a webhook delivery through its replies."""

import uuid
from contextvars import ContextVar
from typing import Callable

import logfire
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

CORRELATION_ID_HEADER = "X-Correlation-ID"

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Correlation ID of the request being handled, if any."""
    return _correlation_id.get()


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with a correlation ID.

    The ID is taken from the incoming header or generated, stored on
    ``request.state``, echoed in the response header, and published through
    a context variable. Background tasks run inside the request's context,
    so Send API logs for a webhook delivery carry its ID.
    """

    def __init__(self, app: ASGIApp, header_name: str = CORRELATION_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        token = _correlation_id.set(correlation_id)

        try:
            with logfire.span(
                "{method} {path}",
                method=request.method,
                path=request.url.path,
                correlation_id=correlation_id,
            ):
                response = await call_next(request)
        finally:
            _correlation_id.reset(token)

        response.headers[self.header_name] = correlation_id
        return response
