"""Per-request response sink handed to handler members.

A handler member receives ``(writer, request)`` and produces its output
by calling ``write_header`` and ``write`` on the writer. Once the member
returns, the dispatch adapter turns the writer into a ``Response``.
"""

from __future__ import annotations

from perch.http.headers import MutableHeaders
from perch.http.response import Response

DEFAULT_CONTENT_TYPE = "text/plain; charset=utf-8"


class ResponseWriter:
    """Collects status, headers and body bytes for one request.

    The first ``write_header`` call fixes the status; later calls are
    ignored. Writing body bytes before any ``write_header`` fixes the
    status at 200. Headers changed after the status is fixed still end up
    on the response, since nothing is sent until the member returns.
    """

    __slots__ = ("_body", "_headers", "_status")

    def __init__(self) -> None:
        self._headers = MutableHeaders()
        self._status: int | None = None
        self._body = bytearray()

    @property
    def headers(self) -> MutableHeaders:
        """Outgoing headers, writable until the member returns."""
        return self._headers

    @property
    def status(self) -> int:
        """Status written so far, 200 when none was written."""
        return self._status if self._status is not None else 200

    @property
    def wrote_header(self) -> bool:
        return self._status is not None

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    def write_header(self, status: int) -> None:
        """Set the response status. Only the first call counts."""
        if self._status is None:
            self._status = status

    def write(self, data: bytes | str) -> int:
        """Append *data* to the body and return the number of bytes written."""
        if self._status is None:
            self._status = 200
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._body.extend(data)
        return len(data)

    def to_response(self) -> Response:
        """Freeze everything written into a ``Response``."""
        content_type = self._headers.get("Content-Type") or DEFAULT_CONTENT_TYPE
        headers = tuple(
            (name, value) for name, value in self._headers.items() if name.lower() != "content-type"
        )
        return Response(
            body=bytes(self._body),
            status=self.status,
            content_type=content_type,
            headers=headers,
        )

    def __repr__(self) -> str:
        return f"ResponseWriter(status={self.status}, bytes={len(self._body)})"
