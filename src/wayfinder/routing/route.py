"""RouteDeclaration, Route and MatchResult frozen dataclasses."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from wayfinder.preload import PreloadContext
    from wayfinder.routing.params import MatchParams
    from wayfinder.state import RouteState

# A view renders a route given its state and the output of its child route
View: TypeAlias = "Callable[[Route, RouteState, Any], Any]"

# Guards and resolvers may return a value or an awaitable
Guard: TypeAlias = "Callable[[PreloadContext], Awaitable[Any] | Any]"
Resolver: TypeAlias = "Callable[[PreloadContext], Awaitable[Any] | Any]"

# Resolver groups run in order; the resolvers of one group run concurrently
ResolverGroup: TypeAlias = "Mapping[str, Resolver]"


@dataclass(frozen=True, slots=True)
class RouteDeclaration:
    """A route as declared by the application.

    Usage::

        RouteDeclaration(
            "/users",
            view=users_layout,
            guards=[require_login],
            children=[
                RouteDeclaration("/:id", view=user_view, resolvers=[{"user": load_user}]),
            ],
        )

    Sequences are normalized to tuples so declarations stay immutable.
    Whether the node has a ``view`` or ``children`` is checked when the
    tree is compiled, not here.
    """

    match: str
    view: View | None = None
    children: Sequence[RouteDeclaration] = ()
    guards: Sequence[Guard] = ()
    resolvers: Sequence[ResolverGroup] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))
        object.__setattr__(self, "guards", tuple(self.guards))
        object.__setattr__(self, "resolvers", tuple(self.resolvers))


@dataclass(frozen=True, slots=True, eq=False)
class Route:
    """A declaration tagged with a stable id at compile time.

    Compared by identity. ``declaration`` points back at the source node.
    """

    id: str
    match: str
    declaration: RouteDeclaration
    view: View | None = None
    children: tuple[Route, ...] = ()
    guards: tuple[Guard, ...] = ()
    resolvers: tuple[ResolverGroup, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.children


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Result of matching a pathname against the hierarchy map.

    An empty ``hierarchy`` means no route matched. ``branch`` is set when
    the matched entry ends at a route with children.
    """

    hierarchy: tuple[str, ...] = ()
    params: MatchParams = None
    template: str | None = None
    branch: bool = False

    @property
    def found(self) -> bool:
        return bool(self.hierarchy)


NO_MATCH = MatchResult()


def needs_preloading(route: Route | RouteDeclaration) -> bool:
    """Whether *route* declares at least one guard or resolver group."""
    return bool(route.guards or route.resolvers)
