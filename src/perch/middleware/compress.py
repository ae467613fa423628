"""Gzip compression middleware.

Compresses response bodies for clients that send ``Accept-Encoding:
gzip``, when the body is large enough, of a text-like content type and
not already encoded. The compressed body is used only if it is smaller.
"""

import gzip

from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next

COMPRESSIBLE_TYPES: frozenset[str] = frozenset(
    {
        "text/html",
        "text/css",
        "text/plain",
        "text/xml",
        "text/javascript",
        "application/json",
        "application/javascript",
        "application/xml",
        "application/xhtml+xml",
        "image/svg+xml",
    }
)


def _accepts_gzip(request: Request) -> bool:
    for value in request.headers.get_list("accept-encoding"):
        for coding in value.split(","):
            name, _, params = coding.strip().partition(";")
            if name.strip().lower() not in ("gzip", "*"):
                continue
            if params.replace(" ", "").lower() in ("q=0", "q=0.0", "q=0.00", "q=0.000"):
                continue
            return True
    return False


class Compress:
    """Gzip responses.

    Usage::

        server = bootstrap(Site, RequestLogger(), Compress(min_size=512))

    Args:
        min_size: Smallest body (in bytes) worth compressing.
        level: gzip compression level, 1 (fastest) to 9 (smallest).
        compressible_types: Base content types eligible for compression.
    """

    __slots__ = ("compressible_types", "level", "min_size")

    def __init__(
        self,
        *,
        min_size: int = 1024,
        level: int = 6,
        compressible_types: frozenset[str] = COMPRESSIBLE_TYPES,
    ) -> None:
        if not 1 <= level <= 9:
            msg = f"gzip level must be between 1 and 9, got {level}"
            raise ValueError(msg)
        self.min_size = min_size
        self.level = level
        self.compressible_types = compressible_types

    async def __call__(self, request: Request, next: Next) -> Response:
        response = await next(request)
        if not _accepts_gzip(request) or not self._should_compress(response):
            return response

        original = response.body_bytes
        compressed = gzip.compress(original, compresslevel=self.level)
        if len(compressed) >= len(original):
            return response

        vary = response.header("Vary")
        if vary is None:
            vary = "Accept-Encoding"
        elif "accept-encoding" not in vary.lower():
            vary = f"{vary}, Accept-Encoding"

        return (
            response.with_body(compressed)
            .without_header("Vary")
            .with_header("Content-Encoding", "gzip")
            .with_header("Vary", vary)
        )

    def _should_compress(self, response: Response) -> bool:
        if response.header("Content-Encoding") is not None:
            return False
        if len(response.body_bytes) < self.min_size:
            return False
        base_type = response.content_type.split(";")[0].strip().lower()
        return base_type in self.compressible_types
