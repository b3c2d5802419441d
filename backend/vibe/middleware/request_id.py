"""
Vibe Backend — Request ID Middleware
=====================================

What:  Tags every request with a short correlation ID.
How:   Reuses a well-formed client `X-Request-ID` header or mints one,
       stores it in a ContextVar for loggers and error handlers, and echoes
       it back on the response.

The same ID appears as `request_id` in every failure envelope, so a client
can quote it when reporting a problem.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Client IDs end up in logs; accept only short token-like values.
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns `request.state.request_id` and the `X-Request-ID` response header."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER, "")
        rid = incoming if _VALID_REQUEST_ID.match(incoming) else new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid
        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
