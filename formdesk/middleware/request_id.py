"""Request ID middleware and log correlation.

Forwards a sane client X-Request-ID or generates one, echoes it on the
response and exposes it to logging through a context variable, so every log
line emitted while serving the request carries it. Raw ASGI.
"""

import re
import uuid
from typing import Callable

from formdesk.shared.logging import request_id_var

REQUEST_ID_MAX_LENGTH = 64
_ALLOWED = re.compile(r"^[a-zA-Z0-9_-]{1," + str(REQUEST_ID_MAX_LENGTH) + r"}$")


def _header(scope: dict, name: bytes) -> str | None:
    for key, value in scope.get("headers", []):
        if key.lower() == name:
            return value.decode("latin-1")
    return None


def _resolve_request_id(raw: str | None) -> str:
    """Keep the client's id only if it cannot inject anything into logs."""
    candidate = (raw or "").strip()
    if _ALLOWED.match(candidate):
        return candidate
    return uuid.uuid4().hex


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    """Attach a request id to scope state, the log context and the response. Raw ASGI."""
    header_key = header_name.lower().encode()

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = _resolve_request_id(_header(scope, header_key))
        scope.setdefault("state", {})["request_id"] = request_id
        token = request_id_var.set(request_id)

        async def send_with_id(message: dict) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (header_key, request_id.encode()),
                ]
            await send(message)

        try:
            await app(scope, receive, send_with_id)
        finally:
            request_id_var.reset(token)

    return asgi_app
