"""ASGI handler: translates ASGI scope/messages to perch types.

The only component that touches raw ASGI HTTP messages. Converts scope
dicts to typed Request objects, runs them through middleware and the
route table, and sends the Response back through ASGI send().
"""

from collections.abc import Awaitable, Callable
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.sender import send_response


def build_chain(
    dispatch: Callable[[Request], Awaitable[Response]],
    middleware: tuple[Callable[..., Any], ...],
) -> Next:
    """Wrap *dispatch* in *middleware*, first entry outermost."""
    handler: Next = dispatch
    for mw in reversed(middleware):
        outer = handler
        mw_ref = mw

        async def make_next(req: Request, _mw: Any = mw_ref, _next: Next = outer) -> Response:
            return await _mw(req, _next)

        handler = make_next
    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatch: Callable[[Request], Awaitable[Response]],
    middleware: tuple[Callable[..., Any], ...],
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    try:
        response = await build_chain(dispatch, middleware)(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, debug)

    await send_response(response, send, head=request.method == "HEAD")
