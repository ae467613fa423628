"""Route and RouteMatch frozen dataclasses."""

from dataclasses import dataclass

from perch._internal.types import Handler

# Path parameter name captured by a mount's catch-all segment.
CATCH_ALL = "*"


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:    ``/users``  (is_param=False)
    Param:     ``/{id}``   (is_param=True, param_name="id")
    Catch-all: ``/*``      (is_param=True, param_name="*", catch_all=True)
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    catch_all: bool = False


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    ``methods=None`` registers the route for every HTTP method.
    ``mount`` marks a prefix delegation registered through
    ``Router.mount``.
    """

    path: str
    handler: Handler
    methods: frozenset[str] | None = None
    name: str | None = None
    mount: bool = False


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
