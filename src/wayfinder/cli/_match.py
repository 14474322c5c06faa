"""``wayfinder match`` — show which routes a path resolves to."""

import argparse
import sys

from wayfinder.cli._resolve import resolve_routes
from wayfinder.cli._routes import describe_chain
from wayfinder.config import RouterConfig
from wayfinder.errors import ConfigurationError
from wayfinder.routing.hierarchy import compile_routes
from wayfinder.routing.matcher import match_hierarchy


def run_match(args: argparse.Namespace) -> None:
    """Print the matched template, route chain and params for ``args.path``.

    Exits with status 1 when nothing matches.
    """
    config = RouterConfig(log_unmatched=False)
    try:
        compiled = compile_routes(resolve_routes(args.routes), config)
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    match = match_hierarchy(
        args.path,
        compiled.hierarchy_map,
        branches=compiled.branches,
        config=config,
    )
    if not match.found:
        print(f"No route matches {args.path!r}", file=sys.stderr)
        raise SystemExit(1)

    print(f"template: {match.template}")
    print(f"routes:   {describe_chain(compiled, match.hierarchy)}")
    if match.params:
        params = ", ".join(f"{key}={value!r}" for key, value in match.params.items())
        print(f"params:   {params}")
    else:
        print("params:   (none)")
