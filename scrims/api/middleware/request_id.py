"""
Request id middleware.

Each request gets an id, taken from X-Request-ID when the caller sent one.
The id is stored on request.state for error bodies, set in the logging
context for the duration of the request, and echoed on the response.
"""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from scrims.logging_config import REQUEST_ID_HEADER, request_id_var


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Adopt or create the request id; a team request and the identity call it makes share one."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
