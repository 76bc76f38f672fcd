"""
RequestContext Middleware - tags every request with an ID.

The ID is stored on ``request.state.request_id``, bound into the structlog
context so every log line emitted while handling the request carries it,
and echoed back in the ``X-Request-ID`` response header. A client-supplied
``X-Request-ID`` is reused.
"""

import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from lifeos.infrastructure.observability.logging import get_logger, log_request

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.debug("Request started", method=request.method, path=request.url.path)

        start_time = time.time()
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        log_request(
            request.method,
            request.url.path,
            response.status_code,
            round((time.time() - start_time) * 1000, 2),
            request_id=request_id,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
