"""Wayfinder exception hierarchy.

Shared across the compiler, matcher, preload pipeline and router so every
module raises and catches the same types.
"""


class WayfinderError(Exception):
    """Base for all wayfinder-specific errors."""


class ConfigurationError(WayfinderError):
    """Raised when router setup is invalid.

    Typically raised while constructing a ``Router``, before any navigation.
    """


class InvalidRouteDeclaration(ConfigurationError):
    """A route declaration cannot be compiled.

    Raised for a node with neither ``view`` nor ``children`` and for
    malformed path templates.
    """

    def __init__(self, match: str, reason: str) -> None:
        self.match = match
        self.reason = reason
        super().__init__(f"Invalid route {match!r}: {reason}")


class HierarchyMismatch(WayfinderError):
    """A matched hierarchy does not line up with the route tree.

    Points at a compiler bug. Never caused by user input alone.
    """

    def __init__(self, route_id: str, detail: str) -> None:
        self.route_id = route_id
        super().__init__(f"Hierarchy does not match routes. Route {route_id}: {detail}")


class NoRouteMatched(WayfinderError):
    """The current route was read while no route matched the location."""

    def __init__(self, pathname: str) -> None:
        self.pathname = pathname
        super().__init__(
            f"No route matches {pathname!r}. Declare a '*' catch-all to handle unknown paths."
        )


class RouteStateMissing(WayfinderError):
    """State was requested for a route that is not in the active hierarchy."""

    def __init__(self, route_id: str) -> None:
        self.route_id = route_id
        super().__init__(f"Attempt to access uninitialized route state. Route {route_id}")


class PreloadError(WayfinderError):
    """A guard or resolver failed.

    The original exception is chained as ``__cause__``. The route's
    preload is left non-completed and is not retried.
    """

    def __init__(self, route_id: str, phase: str, detail: str = "") -> None:
        self.route_id = route_id
        self.phase = phase
        self.detail = detail
        msg = f"{phase} failed for route {route_id}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
