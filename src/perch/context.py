"""Request and response helpers for handler-bearing classes.

Inherit from ``Context`` to get them as methods::

    class Site(Context):
        async def GetUserByID(self, w, r):
            user_id = await self.param(r, "id")
            self.json(w, 200, {"id": user_id})

The helper names are lower-case, so the route scan never mistakes them
for routes.
"""

import json
import logging
from pathlib import Path

from perch.errors import ConfigurationError
from perch.http.forms import is_form_content_type
from perch.http.request import Request
from perch.http.writer import ResponseWriter
from perch.middleware.files import guess_content_type
from perch.server.errors import status_text

logger = logging.getLogger("perch.server")


class Context:
    """Mixin with helpers for writing handler members."""

    async def param(self, request: Request, key: str) -> str:
        """Look up *key* on the request.

        Sources, in order of priority: path parameter, query string,
        form body. Returns ``""`` when none of them has a non-empty value.
        """
        value = request.path_params.get(key)
        if value:
            return value

        value = request.query.get(key)
        if value:
            return value

        if is_form_content_type(request.content_type):
            try:
                form = await request.form()
            except (ValueError, UnicodeDecodeError, ConfigurationError):
                logger.debug("unreadable form body on %s %s", request.method, request.path)
                return ""
            return form.get(key) or ""

        return ""

    def respond(
        self,
        w: ResponseWriter,
        content_type: str,
        status: int,
        data: bytes | str,
    ) -> None:
        """Write *data* with the given content type and status."""
        w.headers.set("Content-Type", content_type)
        w.write_header(status)
        w.write(data)

    def error(self, w: ResponseWriter, status: int) -> None:
        """Write the reason phrase for *status* as a plain-text response."""
        self.respond(w, "text/plain", status, status_text(status))

    def json(self, w: ResponseWriter, status: int, value: object) -> None:
        """Write *value* as compact JSON.

        A value that cannot be serialised, NaN and infinities included,
        produces a plain-text 500 instead.
        """
        try:
            data = json.dumps(value, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError):
            logger.exception("cannot encode %s as JSON", type(value).__qualname__)
            self.error(w, 500)
            return
        self.respond(w, "application/json", status, data)

    def serve_file(self, w: ResponseWriter, request: Request, filename: str | Path) -> None:
        """Write the contents of *filename*, or a 404 when it is not a file."""
        path = Path(filename)
        if not path.is_file():
            logger.debug("%s %s: no file %s", request.method, request.path, path)
            self.error(w, 404)
            return
        self.respond(w, guess_content_type(path), 200, path.read_bytes())
