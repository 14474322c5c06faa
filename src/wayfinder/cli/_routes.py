"""``wayfinder routes`` — list compiled templates in match order.

Resolves an import string to route declarations, compiles them and prints
every template of the hierarchy map with the route chain it resolves to.
"""

import argparse
import sys

from wayfinder.cli._resolve import resolve_routes
from wayfinder.config import RouterConfig
from wayfinder.errors import ConfigurationError
from wayfinder.routing.hierarchy import CompiledRoutes, compile_routes


def describe_chain(compiled: CompiledRoutes, hierarchy: tuple[str, ...]) -> str:
    """Render a hierarchy as its route templates, e.g. ``/users > /:id``."""
    return " > ".join(compiled.by_id[route_id].match for route_id in hierarchy)


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of TEMPLATE, KIND and ROUTES, in match order."""
    try:
        declarations = resolve_routes(args.routes)
        compiled = compile_routes(declarations)
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not compiled.hierarchy_map:
        print("No routes declared.")
        return

    wildcard = RouterConfig().wildcard
    rows: list[tuple[str, str, str]] = []
    for template, hierarchy in compiled.hierarchy_map.items():
        if template == wildcard:
            kind = "catch-all"
        elif template in compiled.branches:
            kind = "branch"
        else:
            kind = "leaf"
        rows.append((template, kind, describe_chain(compiled, hierarchy)))

    # Column widths
    max_template = max(max(len(r[0]) for r in rows), 8)  # "TEMPLATE" header
    max_kind = max(max(len(r[1]) for r in rows), 4)  # "KIND" header

    fmt = f"{{:<{max_template}}}  {{:<{max_kind}}}  {{}}"
    print(fmt.format("TEMPLATE", "KIND", "ROUTES"))
    sep_len = max_template + max_kind + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for template, kind, chain in rows:
        print(fmt.format(template, kind, chain))
