"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    Compress -- Gzip response bodies for clients that accept it
    Recoverer -- Turn exceptions from handler members into 500 responses
    RequestLogger -- One access log line per request

Mount sub-handlers:
    FileServer -- Serve a directory tree under a mount prefix
"""

from perch.middleware.compress import Compress
from perch.middleware.files import FileServer
from perch.middleware.logging import RequestLogger
from perch.middleware.protocol import Middleware, Next
from perch.middleware.recover import Recoverer

__all__ = [
    "Compress",
    "FileServer",
    "Middleware",
    "Next",
    "Recoverer",
    "RequestLogger",
]
