from __future__ import annotations

import contextvars
import logging
import time
import uuid
from typing import Awaitable, Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"

current_request_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "chess_rules_request_id", default=None
)


class RequestIDLogFilter(logging.Filter):
    """Stamp ``record.request_id`` with the id of the request being served.

    Attached to handlers, so engine and selector logs emitted while a request
    is in flight carry the same id as the access lines. Records logged
    outside a request get ``"-"``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = current_request_id.get() or "-"
        return True


def install_request_id_filter(root: Optional[logging.Logger] = None) -> None:
    """Add one :class:`RequestIDLogFilter` to every handler of ``root``."""
    root = root or logging.getLogger()
    for handler in root.handlers:
        if not any(isinstance(f, RequestIDLogFilter) for f in handler.filters):
            handler.addFilter(RequestIDLogFilter())


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the duration of a request and log one access line.

    An incoming ``x-request-id`` is reused, otherwise a uuid4 is generated.
    The id is exposed as ``request.state.request_id`` for the error envelope,
    bound to :data:`current_request_id` for log records, and echoed back.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = current_request_id.set(request_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            current_request_id.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "%s %s -> %d",
            request.method,
            request.url.path,
            response.status_code,
            extra={
                "request_id": request_id,
                "game_id": request.path_params.get("game_id"),
                "duration_ms": round((time.perf_counter() - start) * 1000, 1),
            },
        )
        return response
