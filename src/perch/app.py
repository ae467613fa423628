"""The perch Server: the facade ``bootstrap()`` returns.

Immutable once built: the route table is compiled before the Server
exists, and nothing on the request path mutates it.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch.config import ServerConfig
from perch.http.request import Request
from perch.http.response import Response
from perch.routing.router import Router
from perch.server.errors import error_response
from perch.server.handler import build_chain, handle_request

if TYPE_CHECKING:
    from perch.builder import MethodDescriptor


class Server:
    """An ASGI application serving a compiled route table.

    Usage::

        server = bootstrap(Site, RequestLogger(), Recoverer())
        server.routes()          # ["/", "/user/{id}", "/web/*"]
        server.run()             # or hand `server` to any ASGI server

    A Server is also a valid mount target: a mount member may return one
    and its routes are served under the mount prefix, behind its own
    middleware.
    """

    __slots__ = ("_config", "_descriptors", "_middleware", "_router")

    def __init__(
        self,
        router: Router | None,
        *,
        middleware: tuple[Callable[..., Any], ...] = (),
        config: ServerConfig | None = None,
        descriptors: tuple["MethodDescriptor", ...] = (),
    ) -> None:
        if router is not None and not router.compiled:
            router.compile()
        self._router = router
        self._middleware = tuple(middleware)
        self._config = config or ServerConfig()
        self._descriptors = descriptors

    @property
    def config(self) -> ServerConfig:
        return self._config

    @property
    def router(self) -> Router | None:
        return self._router

    @property
    def middleware(self) -> tuple[Callable[..., Any], ...]:
        return self._middleware

    @property
    def descriptors(self) -> tuple["MethodDescriptor", ...]:
        """Every member that compiled into a route, handlers first, in registration order."""
        return self._descriptors

    def routes(self) -> list[str]:
        """Patterns with a handler for at least one method.

        Mounts are listed as ``prefix/*``.
        """
        if self._router is None:
            return []
        return self._router.patterns

    # -- Request handling --

    async def dispatch(self, request: Request) -> Response:
        """Route *request* without running middleware.

        Raises ``NotFound`` / ``MethodNotAllowed`` from the router.
        """
        if self._router is None:
            return error_response(404)
        match = self._router.match(request.method, request.path)
        return await invoke(match.route.handler, request.with_path_params(match.path_params))

    async def handle(self, request: Request) -> Response:
        """Run *request* through the middleware chain and the route table."""
        return await build_chain(self.dispatch, self._middleware)(request)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Answers the lifespan protocol itself, then delegates HTTP scopes
        to the request pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(
            scope,
            receive,
            send,
            dispatch=self.dispatch,
            middleware=self._middleware,
            debug=self._config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Everything was built at bootstrap, so startup and shutdown only
        have to be acknowledged.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve with pounce until interrupted.

        Requires the ``server`` extra (``pip install perch[server]``).
        ``config.debug`` turns on auto-reload.

        Args:
            host: Override bind host.
            port: Override bind port.
        """
        from perch.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self._config.host,
            port if port is not None else self._config.port,
            reload=self._config.debug,
            reload_include=self._config.reload_include,
            reload_dirs=self._config.reload_dirs,
            workers=self._config.workers,
        )

    def __repr__(self) -> str:
        return f"Server(routes={self.routes()!r})"
