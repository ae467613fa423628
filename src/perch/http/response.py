"""Immutable response values passed back through middleware.

Each transformation returns a new Response. Handler members never build
these directly; they write to a ``ResponseWriter`` which is converted
once the member returns. Middleware and sub-handlers work on Response.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/plain; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> Response:
        """Copy with *status*."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Copy with one more header; existing values for *name* stay."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Copy with every pair in *headers* appended."""
        return replace(self, headers=self.headers + tuple(headers.items()))

    def with_content_type(self, content_type: str) -> Response:
        """Copy with *content_type*."""
        return replace(self, content_type=content_type)

    def with_body(self, body: str | bytes) -> Response:
        """Return a new Response carrying *body*."""
        return replace(self, body=body)

    def without_header(self, name: str) -> Response:
        """Return a new Response with every *name* header removed."""
        lowered = name.lower()
        kept = tuple((k, v) for k, v in self.headers if k.lower() != lowered)
        return replace(self, headers=kept)

    def header(self, name: str) -> str | None:
        """First value of header *name*, or None."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None

    # -- Body helpers --

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body
