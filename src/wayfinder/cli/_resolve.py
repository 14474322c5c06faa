"""Route import resolution for ``wayfinder routes`` and ``wayfinder match``.

Turns ``"package.module:attribute"`` into the route declarations it names.
"""

import importlib
from collections.abc import Sequence

from wayfinder.routing.route import Route, RouteDeclaration

DEFAULT_ATTRIBUTE = "routes"


def resolve_routes(import_string: str) -> tuple[RouteDeclaration | Route, ...]:
    """Import the route declarations named by *import_string*.

    ``"myapp.urls:routes"`` reads ``routes`` from ``myapp.urls``; a bare
    module path reads its ``routes`` attribute. A callable attribute is
    treated as a factory and called with no arguments.

    Raises:
        ModuleNotFoundError: The module does not exist.
        AttributeError: The module has no such attribute.
        TypeError: The target (or the factory's result) is not a sequence
            of ``RouteDeclaration``/``Route``, or the factory raised.
    """
    module_name, _, attribute = import_string.partition(":")
    target = getattr(importlib.import_module(module_name), attribute or DEFAULT_ATTRIBUTE)

    if callable(target):
        try:
            target = target()
        except Exception as exc:
            msg = f"Route factory {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(target, (str, bytes)) or not isinstance(target, Sequence):
        msg = f"{import_string!r} resolved to {type(target).__name__}, not a sequence of routes"
        raise TypeError(msg)

    for node in target:
        if not isinstance(node, (RouteDeclaration, Route)):
            msg = f"{import_string!r} contains {type(node).__name__}, not a RouteDeclaration"
            raise TypeError(msg)

    return tuple(target)
