"""Route tree compilation.

Tags every declaration with a stable id and flattens the tree into an
ordered hierarchy map::

    [RouteDeclaration("/users", children=[RouteDeclaration("/:id", view=v)])]

    -> {"/users/:id": (users_id, user_id), "/users": (users_id,)}

Entries are recorded in declaration order, children before their parent,
and that order is the match precedence.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import TypeAlias

from wayfinder.config import RouterConfig
from wayfinder.errors import HierarchyMismatch, InvalidRouteDeclaration
from wayfinder.routing.params import compile_template
from wayfinder.routing.route import Route, RouteDeclaration

logger = logging.getLogger("wayfinder.routing")

# Merged template -> route ids from root to the route that produces it
HierarchyMap: TypeAlias = Mapping[str, tuple[str, ...]]


def merge_paths(left: str, right: str) -> str:
    """Join two path templates with exactly one slash between them.

    ``merge_paths("/a/", "/b")``, ``merge_paths("/a", "b")`` and
    ``merge_paths("/a", "/b")`` all return ``"/a/b"``. An empty side
    returns the other one unchanged.
    """
    if not left:
        return right
    if not right:
        return left
    return f"{left.rstrip('/')}/{right.lstrip('/')}"


def tag_routes(
    declarations: Sequence[RouteDeclaration | Route],
    *,
    id_bytes: int = 12,
) -> tuple[Route, ...]:
    """Assign ids to a declaration tree.

    Nodes that are already tagged keep their id (and their subtree), so
    recompiling a tagged tree never invalidates state keyed by id.

    Raises ``InvalidRouteDeclaration`` for a node with neither a view
    nor children.
    """
    return tuple(_tag(node, id_bytes) for node in declarations)


def _tag(node: RouteDeclaration | Route, id_bytes: int) -> Route:
    if isinstance(node, Route):
        return node
    if node.view is None and not node.children:
        raise InvalidRouteDeclaration(node.match, "a route needs a view or children")
    return Route(
        id=secrets.token_urlsafe(id_bytes),
        match=node.match,
        declaration=node,
        view=node.view,
        children=tuple(_tag(child, id_bytes) for child in node.children),
        guards=tuple(node.guards),
        resolvers=tuple(node.resolvers),
    )


def build_hierarchy_map(
    routes: Sequence[Route],
) -> tuple[dict[str, tuple[str, ...]], frozenset[str]]:
    """Flatten *routes* into ``(hierarchy_map, branches)``.

    Every route gets an entry at its own merged template, including routes
    with children, so intermediate routes can be matched directly for
    preloading. ``branches`` holds the templates of those entries.

    When two routes merge to the same template the first one wins.
    """
    hierarchy_map: dict[str, tuple[str, ...]] = {}
    branches: set[str] = set()
    _collect(routes, "", (), hierarchy_map, branches)
    return hierarchy_map, frozenset(branches)


def _collect(
    routes: Sequence[Route],
    prefix: str,
    parents: tuple[str, ...],
    hierarchy_map: dict[str, tuple[str, ...]],
    branches: set[str],
) -> None:
    for route in routes:
        template = merge_paths(prefix, route.match)
        hierarchy = (*parents, route.id)

        if route.children:
            _collect(route.children, template, hierarchy, hierarchy_map, branches)

        if template in hierarchy_map:
            logger.debug("Route %s at %r is shadowed by an earlier declaration", route.id, template)
            continue

        hierarchy_map[template] = hierarchy
        if route.children:
            branches.add(template)


def routes_for_hierarchy(
    hierarchy: Sequence[str],
    routes: Sequence[Route],
    *,
    partial: bool = False,
) -> tuple[Route, ...]:
    """Map a hierarchy of ids to its routes, root first.

    *partial* allows the hierarchy to end at a route with children (an
    intermediate route matched directly).

    Raises ``HierarchyMismatch`` when the ids do not follow the tree.
    """
    result: list[Route] = []
    level: Sequence[Route] = routes
    remaining = list(hierarchy)

    while remaining:
        route_id = remaining.pop(0)
        route = next((r for r in level if r.id == route_id), None)
        if route is None:
            raise HierarchyMismatch(route_id, "not found at this level of the route tree")
        result.append(route)

        if route.children:
            if not remaining and not partial:
                raise HierarchyMismatch(route.id, "has children but the hierarchy ends here")
            level = route.children
        elif remaining:
            raise HierarchyMismatch(
                route.id, f"has no children but the hierarchy continues with {remaining}"
            )

    return tuple(result)


def iter_routes(routes: Sequence[Route]) -> Iterator[Route]:
    """Yield every route of the tree, depth first."""
    for route in routes:
        yield route
        yield from iter_routes(route.children)


@dataclass(frozen=True, slots=True, eq=False)
class CompiledRoutes:
    """A tagged route tree and its hierarchy map. Built once per router.

    Attributes:
        declarations: The sequence the tree was compiled from.
        routes: Top-level tagged routes.
        hierarchy_map: Merged template -> ids, in match order.
        branches: Templates whose entry ends at a route with children.
        by_id: Every route keyed by id.
    """

    declarations: tuple[RouteDeclaration | Route, ...]
    routes: tuple[Route, ...]
    hierarchy_map: HierarchyMap
    branches: frozenset[str]
    by_id: Mapping[str, Route]

    def get(self, route_id: str) -> Route | None:
        return self.by_id.get(route_id)


def compile_routes(
    declarations: Sequence[RouteDeclaration | Route],
    config: RouterConfig | None = None,
) -> CompiledRoutes:
    """Tag *declarations* and build their hierarchy map.

    Every template is compiled up front so malformed templates fail here
    rather than during navigation.
    """
    config = config or RouterConfig()
    routes = tag_routes(declarations, id_bytes=config.id_bytes)
    hierarchy_map, branches = build_hierarchy_map(routes)

    for template in hierarchy_map:
        if template != config.wildcard:
            compile_template(
                template,
                case_sensitive=config.case_sensitive,
                strict=config.strict_slashes,
            )

    by_id = {route.id: route for route in iter_routes(routes)}
    logger.debug("Compiled %d routes into %d templates", len(by_id), len(hierarchy_map))

    return CompiledRoutes(
        declarations=tuple(declarations),
        routes=routes,
        hierarchy_map=MappingProxyType(hierarchy_map),
        branches=branches,
        by_id=MappingProxyType(by_id),
    )
