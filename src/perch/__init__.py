"""Perch: HTTP routes derived from method names.

Write a class whose method names say what they serve, and perch builds
the route table from them::

    from perch import Context, bootstrap
    from perch.middleware import FileServer, RequestLogger

    class Site(Context):
        def GetRoot(self, w, r):
            self.respond(w, "text/plain", 200, b"hello")

        async def GetUserByID(self, w, r):           # GET /user/{id}
            self.json(w, 200, {"id": await self.param(r, "id")})

        def MountStatic(self):                       # /static/*
            return FileServer("./public")

    server = bootstrap(Site, RequestLogger())
    server.run()

The Provider (``Site`` above) is called once at bootstrap and again for
every request, so each request gets a fresh instance.
"""

__version__ = "0.1.0"
__all__ = [
    "BootstrapError",
    "ConfigurationError",
    "Context",
    "HTTPError",
    "MethodDescriptor",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "PerchError",
    "Request",
    "Response",
    "ResponseWriter",
    "Server",
    "ServerConfig",
    "bootstrap",
    "compile_handler_name",
    "compile_mount_name",
    "segment_identifier",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name in ("bootstrap", "MethodDescriptor"):
        from perch import builder as _builder

        return getattr(_builder, name)

    if name == "Server":
        from perch.app import Server

        return Server

    if name == "ServerConfig":
        from perch.config import ServerConfig

        return ServerConfig

    if name == "Context":
        from perch.context import Context

        return Context

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name == "ResponseWriter":
        from perch.http.writer import ResponseWriter

        return ResponseWriter

    if name in ("Middleware", "Next"):
        from perch.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("compile_handler_name", "compile_mount_name", "segment_identifier"):
        from perch.routing import names as _names

        return getattr(_names, name)

    if name in (
        "BootstrapError",
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "PerchError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
