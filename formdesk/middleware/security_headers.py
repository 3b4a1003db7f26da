"""Security headers for JSON API responses. Raw ASGI.

HSTS is only sent over https; headers the app already set are left alone.
"""

from typing import Callable

API_HEADERS: dict[str, str] = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
}
HSTS_VALUE = "max-age=31536000; includeSubDomains"

# Interactive docs load scripts and styles; the strict CSP would blank them.
_DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")


def SecurityHeadersMiddleware(app: Callable, headers: dict[str, str] | None = None) -> Callable:
    """Add security headers to every HTTP response."""
    base = [(k.lower().encode(), v.encode()) for k, v in (headers or API_HEADERS).items()]
    hsts = (b"strict-transport-security", HSTS_VALUE.encode())

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        extra = list(base)
        if scope.get("path", "").startswith(_DOCS_PATHS):
            extra = [h for h in extra if h[0] != b"content-security-policy"]
        if scope.get("scheme") == "https":
            extra.append(hsts)

        async def send_with_headers(message: dict) -> None:
            if message["type"] == "http.response.start":
                current = list(message.get("headers", []))
                present = {name.lower() for name, _ in current}
                current.extend(h for h in extra if h[0] not in present)
                message["headers"] = current
            await send(message)

        await app(scope, receive, send_with_headers)

    return asgi_app
