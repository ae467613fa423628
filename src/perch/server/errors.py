"""Error handling pipeline for perch requests.

Maps HTTPError exceptions and unexpected failures to plain-text
responses whose body is the status reason phrase.
"""

import logging
import traceback
from http import HTTPStatus

from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response

logger = logging.getLogger("perch.server")


def status_text(status: int) -> str:
    """Reason phrase for *status* (``404`` -> ``"Not Found"``)."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return f"Error {status}"


def error_response(status: int) -> Response:
    """Plain-text response carrying the reason phrase for *status*."""
    return Response(body=status_text(status), status=status)


async def handle_http_error(exc: HTTPError, request: Request, debug: bool) -> Response:
    """Map an HTTPError to a Response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    body = status_text(exc.status)
    if debug and exc.detail and exc.detail != body:
        body = f"{body}: {exc.detail}"

    resp = Response(body=body, status=exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


async def handle_internal_error(exc: Exception, request: Request, debug: bool) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    if debug:
        body = "Internal Server Error\n\n" + "".join(traceback.format_exception(exc))
        return Response(body=body, status=500)

    return error_response(500)
