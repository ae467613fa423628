"""Panic-recovery middleware.

Turns any exception escaping the inner chain into a plain-text 500
response, logging the traceback on ``perch.server``. HTTP errors raised
by the router (404, 405) pass through untouched.
"""

import logging
import traceback

from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next
from perch.server.errors import error_response

logger = logging.getLogger("perch.server")


class Recoverer:
    """Recover from exceptions raised by handler members and inner middleware.

    With ``debug=True`` the traceback is included in the response body.
    """

    __slots__ = ("debug",)

    def __init__(self, *, debug: bool = False) -> None:
        self.debug = debug

    async def __call__(self, request: Request, next: Next) -> Response:
        try:
            return await next(request)
        except HTTPError:
            raise
        except Exception as exc:
            logger.exception(
                "recovered from %s on %s %s", type(exc).__name__, request.method, request.path
            )
            if self.debug:
                body = "Internal Server Error\n\n" + "".join(traceback.format_exception(exc))
                return Response(body=body, status=500)
            return error_response(500)
