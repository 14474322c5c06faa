"""Pathname -> hierarchy matching.

Walks the hierarchy map in declaration order and returns the first entry
whose template matches. There is no specificity ranking: a route declared
earlier wins over a more specific one declared later.
"""

import logging
from collections.abc import Set

from wayfinder.config import RouterConfig
from wayfinder.routing.hierarchy import HierarchyMap
from wayfinder.routing.params import compile_template
from wayfinder.routing.route import NO_MATCH, MatchResult

logger = logging.getLogger("wayfinder.routing")


def match_hierarchy(
    path: str,
    hierarchy_map: HierarchyMap,
    *,
    branches: Set[str] = frozenset(),
    config: RouterConfig | None = None,
) -> MatchResult:
    """Match *path* against *hierarchy_map*.

    The wildcard template matches unconditionally with ``params=None``.
    Returns ``NO_MATCH`` (an empty hierarchy) when nothing matches; the
    caller decides how to render that.
    """
    config = config or RouterConfig()

    for template, hierarchy in hierarchy_map.items():
        if template == config.wildcard:
            return MatchResult(
                hierarchy=hierarchy,
                params=None,
                template=template,
                branch=template in branches,
            )

        compiled = compile_template(
            template,
            case_sensitive=config.case_sensitive,
            strict=config.strict_slashes,
        )
        params = compiled.match(path)
        if params is not None:
            return MatchResult(
                hierarchy=hierarchy,
                params=params,
                template=template,
                branch=template in branches,
            )

    if config.log_unmatched:
        logger.warning("No route found for %r", path)
    return NO_MATCH
