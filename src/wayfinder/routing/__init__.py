"""Routing — route declarations compiled into an ordered hierarchy map.

Routes are declared as a tree, tagged with ids and flattened once when the
router is built. Matching walks the flattened map in declaration order.
"""

from wayfinder.routing.hierarchy import (
    CompiledRoutes,
    HierarchyMap,
    build_hierarchy_map,
    compile_routes,
    merge_paths,
    routes_for_hierarchy,
    tag_routes,
)
from wayfinder.routing.matcher import match_hierarchy
from wayfinder.routing.params import MatchParams, PathTemplate, compile_template, matches_template
from wayfinder.routing.route import NO_MATCH, MatchResult, Route, RouteDeclaration

__all__ = [
    "NO_MATCH",
    "CompiledRoutes",
    "HierarchyMap",
    "MatchParams",
    "MatchResult",
    "PathTemplate",
    "Route",
    "RouteDeclaration",
    "build_hierarchy_map",
    "compile_routes",
    "compile_template",
    "match_hierarchy",
    "matches_template",
    "merge_paths",
    "routes_for_hierarchy",
    "tag_routes",
]
