"""Access logging middleware.

One line per request on the ``perch.access`` logger::

    127.0.0.1 "GET /user/42" 200 17B 0.4ms

The library never configures handlers; the host application decides
where these lines go.
"""

import logging
import time

from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next

logger = logging.getLogger("perch.access")


class RequestLogger:
    """Log method, path, status, body size and duration of every request.

    Requests that end in an exception are logged with status 500 before
    the exception continues outward.
    """

    __slots__ = ("level", "logger")

    def __init__(self, *, level: int = logging.INFO, log: logging.Logger | None = None) -> None:
        self.level = level
        self.logger = log or logger

    async def __call__(self, request: Request, next: Next) -> Response:
        start = time.perf_counter()
        try:
            response = await next(request)
        except Exception:
            self._log(request, 500, 0, start)
            raise
        self._log(request, response.status, len(response.body_bytes), start)
        return response

    def _log(self, request: Request, status: int, size: int, start: float) -> None:
        if not self.logger.isEnabledFor(self.level):
            return
        elapsed_ms = (time.perf_counter() - start) * 1000
        client = request.client[0] if request.client else "-"
        self.logger.log(
            self.level,
            '%s "%s %s" %d %dB %.1fms',
            client,
            request.method,
            request.url,
            status,
            size,
            elapsed_ms,
        )
