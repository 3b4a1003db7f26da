"""HTTP middleware: timeout, request ID, security headers.

Applied in formdesk.main; order matters (last added = outermost).
"""

from formdesk.middleware.request_id import RequestIDMiddleware
from formdesk.middleware.security_headers import SecurityHeadersMiddleware
from formdesk.middleware.timeout import TimeoutMiddleware

__all__ = [
    "RequestIDMiddleware",
    "SecurityHeadersMiddleware",
    "TimeoutMiddleware",
]
