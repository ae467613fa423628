"""The request object handed to handler members.

Request metadata is fixed when the ASGI scope is translated. The router
and mounts derive new requests (``with_path_params``, ``with_path``)
rather than changing one, and every derived request shares the body of
the request it came from, so a mount's sub-handler can still read a
body that middleware already consumed.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from perch._internal.asgi import Receive, Scope
from perch.http.headers import Headers
from perch.http.query import QueryParams

if TYPE_CHECKING:
    from perch.http.forms import FormData


class _BodyState:
    """Body bytes and parsed form, filled on first access."""

    __slots__ = ("data", "form")

    def __init__(self) -> None:
        self.data: bytes | None = None
        self.form: FormData | None = None


def _address(value: Any) -> tuple[str, int] | None:
    return (value[0], value[1]) if value else None


@dataclass(frozen=True, slots=True)
class Request:
    """One HTTP request.

    The ASGI ``receive`` channel can be drained only once; ``body()``
    keeps what it read, and ``text()``, ``json()`` and ``form()`` all
    decode from that copy.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    path_params: dict[str, str]
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None
    _receive: Receive
    _state: _BodyState = field(default_factory=_BodyState, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """The request target as sent: path plus ``?query`` when present."""
        if not self.query.raw:
            return self.path
        return f"{self.path}?{self.query.raw.decode('latin-1')}"

    def with_path_params(self, path_params: dict[str, str]) -> Request:
        """Copy of this request carrying *path_params* from a route match."""
        return replace(self, path_params=path_params)

    def with_path(self, path: str) -> Request:
        """Copy of this request addressed to *path*; mounts use it to drop their prefix."""
        return replace(self, path=path)

    async def stream(self) -> AsyncGenerator[bytes]:
        """Yield body chunks straight from the ASGI channel, uncached."""
        more = True
        while more:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            more = message.get("more_body", False)

    async def body(self) -> bytes:
        """The whole body, read on first call and reused afterwards."""
        if self._state.data is None:
            self._state.data = b"".join([chunk async for chunk in self.stream()])
        return self._state.data

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        return json.loads(await self.body())

    async def form(self) -> FormData:
        """Form fields from an urlencoded or multipart body.

        A missing Content-Type is read as urlencoded.

        Raises:
            ValueError: The Content-Type is not a form encoding, or a
                multipart body has no boundary.
            ConfigurationError: The body is multipart and
                ``python-multipart`` is not installed.
        """
        if self._state.form is None:
            from perch.http.forms import parse_form_data

            content_type = self.content_type or "application/x-www-form-urlencoded"
            self._state.form = await parse_form_data(await self.body(), content_type)
        return self._state.form

    @classmethod
    def from_asgi(
        cls,
        scope: Scope,
        receive: Receive,
        path_params: dict[str, str] | None = None,
    ) -> Request:
        """Translate an ASGI HTTP scope."""
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            path_params=dict(path_params or {}),
            http_version=scope.get("http_version", "1.1"),
            server=_address(scope.get("server")),
            client=_address(scope.get("client")),
            _receive=receive,
        )
