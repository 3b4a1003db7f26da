"""Request timeout middleware. Raw ASGI.

Cancels a request that runs past the configured limit and answers 504 in the
standard failure envelope, unless the response had already started.
"""

import asyncio
import json
import logging
from typing import Callable

logger = logging.getLogger(__name__)


def TimeoutMiddleware(app: Callable, timeout_seconds: int) -> Callable:
    """Bound each HTTP request to timeout_seconds."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        started = False

        async def tracking_send(message: dict) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await asyncio.wait_for(app(scope, receive, tracking_send), timeout=float(timeout_seconds))
        except asyncio.TimeoutError:
            logger.warning(
                "Request timed out after %ss: %s %s",
                timeout_seconds,
                scope.get("method", ""),
                scope.get("path", ""),
            )
            if started:
                return
            body = json.dumps({
                "success": False,
                "message": f"Request timed out after {timeout_seconds} seconds",
                "error": {
                    "code": "GATEWAY_TIMEOUT",
                    "details": {"timeout_seconds": timeout_seconds},
                },
            }).encode()
            await send({
                "type": "http.response.start",
                "status": 504,
                "headers": [
                    (b"content-type", b"application/json"),
                    (b"content-length", str(len(body)).encode()),
                ],
            })
            await send({"type": "http.response.body", "body": body})

    return asgi_app
