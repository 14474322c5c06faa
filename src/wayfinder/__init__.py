"""Wayfinder — a client-side navigation engine.

Matches the current location against a tree of route declarations, runs
each matched route's guards and resolvers, and keeps the result in step
with history navigation.

Basic usage::

    from wayfinder import RouteDeclaration, Router

    routes = [
        RouteDeclaration("/users", children=[
            RouteDeclaration("/:id", view=user_page),
        ]),
        RouteDeclaration("*", view=not_found),
    ]

    async with Router(routes) as router:
        router.navigate(pathname="/users/42")
        router.params  # {"id": "42"}

Resolve everything before the first render::

    from wayfinder import preload_path

    state = await preload_path(routes, RouterLocation("/users/42"), redirect)
    if state is not None:
        router = Router(routes, initial_state=state)
"""

__version__ = "0.1.0"
__all__ = [
    "CancelToken",
    "ClickEvent",
    "ConfigurationError",
    "HierarchyMismatch",
    "InvalidRouteDeclaration",
    "Link",
    "MatchResult",
    "MemoryHistory",
    "NoRouteMatched",
    "PreloadContext",
    "PreloadError",
    "Route",
    "RouteDeclaration",
    "RouteState",
    "RouteStateMissing",
    "Router",
    "RouterConfig",
    "RouterLocation",
    "RouterState",
    "WayfinderError",
    "compute_state",
    "preload_path",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wayfinder`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from wayfinder.router import Router

        return Router

    if name == "RouterConfig":
        from wayfinder.config import RouterConfig

        return RouterConfig

    if name in ("RouteDeclaration", "Route", "MatchResult"):
        from wayfinder.routing import route

        return getattr(route, name)

    if name in ("RouterLocation", "MemoryHistory"):
        from wayfinder import location

        return getattr(location, name)

    if name in ("RouteState", "RouterState", "compute_state"):
        from wayfinder import state

        return getattr(state, name)

    if name in ("CancelToken", "PreloadContext", "preload_path"):
        from wayfinder import preload

        return getattr(preload, name)

    if name in ("ClickEvent", "Link"):
        from wayfinder import navigation

        return getattr(navigation, name)

    if name in (
        "WayfinderError",
        "ConfigurationError",
        "HierarchyMismatch",
        "InvalidRouteDeclaration",
        "NoRouteMatched",
        "PreloadError",
        "RouteStateMissing",
    ):
        from wayfinder import errors

        return getattr(errors, name)

    msg = f"module 'wayfinder' has no attribute {name!r}"
    raise AttributeError(msg)
