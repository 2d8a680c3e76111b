"""
Customer Details Backend — Request ID Middleware
==================================================

What:  Tags every request with a short correlation id.
How:   Reuses a client-supplied X-Request-ID (trimmed to 64 chars) or
       generates 8 hex chars; stores it in a ContextVar for log lines and
       error bodies, and echoes it in the X-Request-ID response header.
When:  Outermost middleware, so rate-limit rejections and access log
       lines carry the id too.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        client_id = request.headers.get("X-Request-ID", "").strip()
        rid = client_id[:MAX_CLIENT_ID_LENGTH] if client_id else uuid.uuid4().hex[:8]

        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
