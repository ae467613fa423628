"""Static file serving for mounts.

``FileServer`` is a sub-handler, not a middleware: a mount member returns
it and the router hands it every request under the mount prefix, with
the prefix already stripped::

    class Site(Context):
        def MountWeb(self):
            return FileServer("./public")     # /web/a.txt -> ./public/a.txt
"""

import mimetypes
from pathlib import Path

from perch.errors import HTTPError, MethodNotAllowed, NotFound
from perch.http.request import Request
from perch.http.response import Response

_READ_METHODS = frozenset({"GET", "HEAD"})


def guess_content_type(path: str | Path) -> str:
    """Content type for *path* by extension, ``application/octet-stream`` if unknown."""
    content_type, _ = mimetypes.guess_type(str(path))
    return content_type or "application/octet-stream"


class FileServer:
    """Serve files from a directory tree.

    Security: resolves symlinks and verifies the final path is within the
    configured directory to prevent path traversal.
    """

    __slots__ = ("_cache_control", "_directory", "_index")

    def __init__(
        self,
        directory: str | Path,
        *,
        index: str = "index.html",
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._index = index
        self._cache_control = cache_control

    @property
    def directory(self) -> Path:
        return self._directory

    async def handle(self, request: Request) -> Response:
        """Serve the file addressed by ``request.path``."""
        if request.method not in _READ_METHODS:
            raise MethodNotAllowed(_READ_METHODS)

        relative = request.path.lstrip("/")

        # Resolve the file path and check for traversal
        file_path = (self._directory / relative).resolve() if relative else self._directory
        if not file_path.is_relative_to(self._directory):
            raise HTTPError(status=403, detail="Forbidden")

        if file_path.is_dir():
            file_path = file_path / self._index

        if not file_path.is_file():
            raise NotFound(f"No file for {request.path!r}")

        return self._serve_file(file_path)

    def _serve_file(self, file_path: Path) -> Response:
        """Read a file and build a response."""
        body = file_path.read_bytes()
        return Response(
            body=body, content_type=guess_content_type(file_path)
        ).with_header("Cache-Control", self._cache_control)

    def __repr__(self) -> str:
        return f"FileServer({str(self._directory)!r})"
