"""
Request ID middleware for tracking requests across the application.

Every log record emitted while a request is being handled carries that
request's id, so one checkout or cart update can be followed across
services in app.log.
"""

import uuid
import logging
from contextvars import ContextVar
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)

_base_factory = logging.getLogRecordFactory()


def _record_factory(*args, **kwargs):
    record = _base_factory(*args, **kwargs)
    record.request_id = _request_id.get()
    return record


logging.setLogRecordFactory(_record_factory)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Adds a unique request ID to each request.

    1. Reuse the client's X-Request-ID header, or generate a uuid4
    2. Store it in request.state for route handlers
    3. Bind it to the logging context for the lifetime of the request
    4. Echo it in the response headers
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        token = _request_id.set(request_id)
        try:
            response: Response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            _request_id.reset(token)


def get_request_id(request: Request) -> str:
    """Request ID of the current request, or "no-request-id" outside the middleware."""
    return getattr(request.state, "request_id", "no-request-id")
