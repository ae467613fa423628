"""Per-route request handler that re-acquires a value from the Provider.

A ``DispatchAdapter`` never holds an instance of the user's class. Every
request calls the Provider again and runs the recorded member function
on the fresh value, so per-request state can live on that instance.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from perch._internal.invoke import invoke
from perch._internal.types import Provider
from perch.http.request import Request
from perch.http.response import Response
from perch.http.writer import ResponseWriter
from perch.server.errors import error_response

if TYPE_CHECKING:
    from perch.builder import MethodDescriptor

logger = logging.getLogger("perch.server")


class DispatchAdapter:
    """Route handler for one compiled member.

    Provider failures and Provider values of the wrong class become a
    plain-text 500. Exceptions raised by the member itself propagate to
    the middleware chain and the pipeline.
    """

    __slots__ = ("descriptor", "provider")

    def __init__(self, provider: Provider, descriptor: MethodDescriptor) -> None:
        self.provider = provider
        self.descriptor = descriptor

    async def __call__(self, request: Request) -> Response:
        desc = self.descriptor
        try:
            instance = self.provider()
        except Exception:
            logger.exception(
                "provider failed for %s %s (%s)", request.method, request.path, desc.name
            )
            return error_response(500)

        if type(instance) is not desc.owner:
            logger.error(
                "provider returned %s for %s, expected %s",
                type(instance).__qualname__,
                desc.name,
                desc.owner.__qualname__,
            )
            return error_response(500)

        writer = ResponseWriter()
        await invoke(desc.func, instance, writer, request)
        return writer.to_response()

    def __repr__(self) -> str:
        return f"DispatchAdapter({self.descriptor.owner.__qualname__}.{self.descriptor.name})"
