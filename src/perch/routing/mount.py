"""Prefix stripping for mounted sub-handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from perch._internal.invoke import invoke
from perch.errors import NotFound

if TYPE_CHECKING:
    from perch.http.request import Request
    from perch.http.response import Response


def as_handler(target: Any) -> Any:
    """Resolve a mount target to a ``request -> Response`` callable.

    Objects exposing ``handle(request)`` (a ``Server``, a ``FileServer``)
    are used through that method; anything else must be callable itself.
    """
    handle = getattr(target, "handle", None)
    if callable(handle):
        return handle
    return target


class StripPrefix:
    """Call *handler* with *prefix* removed from the request path.

    ``/web/blah.txt`` under prefix ``/web`` reaches the handler as
    ``/blah.txt``; the bare prefix arrives as ``/``. A path outside the
    prefix is a 404.
    """

    __slots__ = ("_handler", "handler", "prefix")

    def __init__(self, prefix: str, handler: Any) -> None:
        self.prefix = prefix.rstrip("/")
        self.handler = handler
        self._handler = as_handler(handler)

    def strip(self, path: str) -> str | None:
        """*path* relative to the prefix, or None if it lies outside it."""
        if not self.prefix:
            return path or "/"
        if path == self.prefix:
            return "/"
        if not path.startswith(self.prefix + "/"):
            return None
        return path[len(self.prefix) :]

    async def __call__(self, request: Request) -> Response:
        stripped = self.strip(request.path)
        if stripped is None:
            raise NotFound(f"{request.path!r} is outside mount {self.prefix or '/'!r}")
        return await invoke(self._handler, request.with_path(stripped))

    def __repr__(self) -> str:
        return f"StripPrefix({self.prefix or '/'!r}, {self.handler!r})"
