"""Shared type aliases used across perch modules."""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from perch.http.request import Request
    from perch.http.response import Response

# Produces a handler-bearing value; raises on failure
Provider: TypeAlias = Callable[[], Any]

# A request handler: takes the request, returns (or awaits) a Response
Handler: TypeAlias = Callable[["Request"], "Response | Awaitable[Response]"]
