"""Development server.

Starts a pounce ASGI server with the live perch Server object.
"""

from __future__ import annotations

from perch.errors import ConfigurationError


def run_dev_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    reload_include: tuple[str, ...] = (),
    reload_dirs: tuple[str, ...] = (),
    workers: int = 1,
) -> None:
    """Serve *app* with pounce until interrupted.

    Pounce's ``run()`` takes an import string (e.g., ``"myapp:server"``),
    but perch has a live ``Server`` object. We use ``pounce.Server``
    directly with the ASGI callable.

    Args:
        app: ASGI callable (perch Server instance).
        host: Bind host address.
        port: Bind port number.
        reload: Enable auto-reload on file changes.
        reload_include: Extra file extensions to watch when reload is
            active (e.g. ``(".html", ".css")``).
        reload_dirs: Extra directories to watch alongside cwd.
        workers: Worker count; forced to 1 when reloading.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError:
        msg = (
            "Server.run() requires the 'pounce' ASGI server. "
            "Install it with: pip install perch[server]"
        )
        raise ConfigurationError(msg) from None

    config = ServerConfig(
        host=host,
        port=port,
        workers=1 if reload else workers,
        reload=reload,
        reload_include=reload_include,
        reload_dirs=reload_dirs,
    )
    Server(config, app).run()
