"""Request ID middleware.

Takes the client's request ID header (or mints a UUID), echoes it on the
response and binds it to request_id_var, so every log line written while
serving the request (cache hits, misses, degradation warnings, store
errors) carries it. Raw ASGI.
"""

import re
import uuid
from typing import Callable

from starlette.datastructures import Headers, MutableHeaders

from app.shared.telemetry.logging import request_id_var

# Accepted client IDs: 1-64 chars of [A-Za-z0-9_-]; anything else is replaced.
REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def _resolve_request_id(candidate: str | None) -> str:
    """Return the client's ID when it is log-safe, otherwise a new UUID4."""
    if candidate:
        candidate = candidate.strip()
        if REQUEST_ID_PATTERN.match(candidate):
            return candidate
    return str(uuid.uuid4())


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    """Bind a request ID for the duration of each HTTP request. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        request_id = _resolve_request_id(Headers(scope=scope).get(header_name))
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_request_id(message: dict) -> None:
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                MutableHeaders(scope=message).append(header_name, request_id)
            await send(message)

        token = request_id_var.set(request_id)
        try:
            await app(scope, receive, send_with_request_id)
        finally:
            request_id_var.reset(token)

    return asgi_app
