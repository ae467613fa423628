"""Route table builder: ``bootstrap()`` and the member scan behind it.

``bootstrap()`` asks the Provider for one handler-bearing value, scans
its class for handler-shaped and mount-shaped members, compiles their
names into routes and returns a ready ``Server``::

    class Site(Context):
        def GetRoot(self, w, r): ...
        def GetUserByID(self, w, r): ...        # GET /user/{id}
        def MountStatic(self):                  # /static/*
            return FileServer("public")

    server = bootstrap(Site, RequestLogger())

The scan happens once. Each route keeps the member's function and calls
it on a fresh instance from the Provider for every request.
"""

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from perch._internal.types import Provider
from perch.app import Server
from perch.config import ServerConfig
from perch.dispatch import DispatchAdapter
from perch.errors import BootstrapError, ConfigurationError
from perch.routing.mount import as_handler
from perch.routing.names import ANY_METHOD, compile_handler_name, compile_mount_name
from perch.routing.route import Route
from perch.routing.router import Router, mount_pattern

logger = logging.getLogger("perch.bootstrap")

MemberKind: TypeAlias = Literal["handler", "mount"]

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True, slots=True)
class MethodDescriptor:
    """A member that compiled into a route.

    ``func`` is the plain function found on the class; it is the member's
    identity at request time. ``owner`` is the class every Provider value
    must be an instance of. ``verb`` is None for mounts, whose
    ``pattern`` is the prefix.
    """

    name: str
    index: int
    func: Callable[..., Any]
    owner: type
    kind: MemberKind
    verb: str | None
    pattern: str

    @property
    def methods(self) -> frozenset[str] | None:
        """HTTP methods the route answers, None for any."""
        if self.verb is None or self.verb == ANY_METHOD:
            return None
        return frozenset({self.verb})

    @property
    def route_pattern(self) -> str:
        """The pattern as reported by ``Server.routes()``."""
        if self.kind == "mount":
            return mount_pattern(self.pattern)
        return self.pattern


def bootstrap(
    provider: Provider,
    *middleware: Callable[..., Any],
    config: ServerConfig | None = None,
) -> Server:
    """Build a ``Server`` from the members of the value *provider* returns.

    Raises:
        BootstrapError: If the Provider fails or returns something other
            than an instance of a user-defined class with public
            methods, or a mount member does not produce a request handler.
    """
    instance = _provide(provider)
    owner = type(instance)

    handlers: list[MethodDescriptor] = []
    mounts: list[MethodDescriptor] = []

    for index, (name, func) in enumerate(iter_members(owner)):
        kind = classify_member(func)
        if kind == "handler":
            compiled = compile_handler_name(name)
            if compiled is None:
                continue
            handlers.append(
                MethodDescriptor(
                    name, index, func, owner, "handler", compiled.verb, compiled.pattern
                )
            )
        elif kind == "mount":
            prefix = compile_mount_name(name)
            if prefix is None:
                continue
            mounts.append(MethodDescriptor(name, index, func, owner, "mount", None, prefix))

    handlers.sort(key=_registration_order)
    mounts.sort(key=_registration_order)

    router = Router()
    registered: dict[tuple[str, str], str] = {}

    for desc in handlers:
        verb = desc.verb or ANY_METHOD
        for (seen_verb, pattern), seen in list(registered.items()):
            if pattern != desc.pattern or not _overlaps(seen_verb, verb):
                continue
            logger.warning(
                "%s replaces %s for %s %s",
                desc.name,
                seen,
                seen_verb if verb == ANY_METHOD else verb,
                desc.pattern,
            )
            if verb == ANY_METHOD:
                del registered[seen_verb, pattern]
        registered[verb, desc.pattern] = desc.name
        route = Route(
            path=desc.pattern,
            handler=DispatchAdapter(provider, desc),
            methods=desc.methods,
            name=desc.name,
        )
        try:
            router.add(route)
        except ConfigurationError as exc:
            raise BootstrapError(f"bootstrap: {desc.name}: {exc}") from exc
        logger.debug(
            "route %s %s -> %s.%s", desc.verb, desc.pattern, owner.__qualname__, desc.name
        )

    for desc in mounts:
        sub = _mount_target(instance, desc)
        router.mount(desc.pattern, sub, name=desc.name)
        logger.debug("mount %s -> %s.%s", desc.route_pattern, owner.__qualname__, desc.name)

    router.compile()
    logger.info(
        "bootstrapped %s: %d routes, %d mounts",
        owner.__qualname__,
        len(handlers),
        len(mounts),
    )
    return Server(
        router,
        middleware=middleware,
        config=config,
        descriptors=(*handlers, *mounts),
    )


def iter_members(cls: type) -> list[tuple[str, Callable[..., Any]]]:
    """Public plain functions of *cls*, inherited ones included, sorted by name.

    Names are resolved along the MRO, so a subclass attribute shadows a
    base class member even when it is not a function itself.
    """
    found: dict[str, Any] = {}
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, value in vars(klass).items():
            if name.startswith("_") or name in found:
                continue
            found[name] = value
    return sorted((name, value) for name, value in found.items() if inspect.isfunction(value))


def classify_member(func: Callable[..., Any]) -> MemberKind | None:
    """Tell handler-shaped from mount-shaped members by signature.

    After ``self``: exactly two required positional parameters (response
    writer, request) is a handler; none at all is a mount. Mounts run
    during bootstrap, so they have to be plain ``def`` functions.
    """
    try:
        params = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        return None
    if not params or params[0].kind not in _POSITIONAL:
        return None

    required = 0
    for param in params[1:]:
        if param.default is not inspect.Parameter.empty:
            continue
        if param.kind in _POSITIONAL:
            required += 1
        elif param.kind is inspect.Parameter.KEYWORD_ONLY:
            return None

    if required == 2:
        return "handler"
    if required == 0 and not inspect.iscoroutinefunction(func):
        return "mount"
    return None


def _registration_order(desc: MethodDescriptor) -> tuple[int, str]:
    return len(desc.name), desc.name


def _overlaps(seen: str, verb: str) -> bool:
    """Whether a route for *verb* hides one already registered for *seen*."""
    return seen == verb or ANY_METHOD in (seen, verb)


def _provide(provider: Provider) -> Any:
    try:
        instance = provider()
    except Exception as exc:
        raise BootstrapError(f"bootstrap: {exc}") from exc

    if instance is None:
        msg = "bootstrap: provider returned None"
        raise BootstrapError(msg)

    if not _is_instance_of_user_class(instance):
        msg = f"bootstrap: expected an instance of a class, got {describe_shape(instance)}"
        raise BootstrapError(msg)

    return instance


def _is_instance_of_user_class(value: Any) -> bool:
    if inspect.isclass(value) or inspect.ismodule(value) or inspect.isroutine(value):
        return False
    if type(value).__module__ == "builtins":
        return False
    # Library values such as Decimal have no Python-level members to scan
    return bool(iter_members(type(value)))


def describe_shape(value: Any) -> str:
    """Short description of what *value* is (``dict``, ``class Foo``, ``module os``)."""
    if inspect.isclass(value):
        return f"class {value.__qualname__}"
    if inspect.ismodule(value):
        return f"module {value.__name__}"
    if inspect.isroutine(value):
        return f"function {getattr(value, '__qualname__', value.__name__)}"
    return type(value).__qualname__


def _mount_target(instance: Any, desc: MethodDescriptor) -> Any:
    try:
        target = desc.func(instance)
    except Exception as exc:
        raise BootstrapError(f"bootstrap: {desc.name}: {exc}") from exc

    if target is None or not callable(as_handler(target)):
        msg = (
            f"bootstrap: {desc.name} must return a request handler, "
            f"got {describe_shape(target)}"
        )
        raise BootstrapError(msg)
    return target
