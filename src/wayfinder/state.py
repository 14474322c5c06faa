"""Router state and its transition function.

``RouterState`` is rebuilt from ``(compiled routes, location, previous
state)`` on every location change and never mutated in place. The only
thing carried over between states is the ``RouteState`` of routes that
stay in the matched hierarchy, so a shared parent keeps its in-flight or
completed preload across navigations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, TypeAlias

from wayfinder.config import RouterConfig
from wayfinder.location import RouterLocation
from wayfinder.routing.hierarchy import CompiledRoutes, routes_for_hierarchy
from wayfinder.routing.matcher import match_hierarchy
from wayfinder.routing.route import MatchResult, Route, needs_preloading

logger = logging.getLogger("wayfinder.routing")


@dataclass(frozen=True, slots=True)
class RouteState:
    """Guarding and resolving status of one route.

    Attributes:
        loading: A preload is pending.
        resolved_data: Resolver results keyed by resolver name.
        completed: Guards and resolvers have all finished.
        error: The failure of the last preload, if it failed.
    """

    loading: bool = False
    resolved_data: Mapping[str, Any] = field(default_factory=dict)
    completed: bool = False
    error: BaseException | None = None

    @classmethod
    def initial(cls, route: Route) -> RouteState:
        """State for a route entering the hierarchy.

        Routes without guards or resolvers are completed on entry.
        """
        if needs_preloading(route):
            return cls(loading=True)
        return cls(completed=True)


@dataclass(frozen=True, slots=True, eq=False)
class RouterState:
    """Everything the router knows. Always in sync with ``location``.

    ``route_states`` holds exactly the routes of ``match.hierarchy``.
    """

    compiled: CompiledRoutes
    location: RouterLocation
    match: MatchResult
    route_states: Mapping[str, RouteState]

    @property
    def routes(self) -> tuple[Route, ...]:
        return self.compiled.routes

    @property
    def hierarchy(self) -> tuple[str, ...]:
        return self.match.hierarchy

    def active_routes(self) -> tuple[Route, ...]:
        """The matched routes, root first."""
        return routes_for_hierarchy(
            self.match.hierarchy, self.compiled.routes, partial=self.match.branch
        )

    def with_route_state(self, route_id: str, state: RouteState) -> RouterState:
        """Return a copy with *route_id*'s state replaced.

        Writes for routes that have left the hierarchy are dropped.
        """
        if route_id not in self.route_states:
            logger.debug("Dropping state write for inactive route %s", route_id)
            return self
        return replace(self, route_states=MappingProxyType({**self.route_states, route_id: state}))


def compute_state(
    compiled: CompiledRoutes,
    location: RouterLocation,
    previous: RouterState | None = None,
    *,
    config: RouterConfig | None = None,
) -> RouterState:
    """Build the router state for *location*.

    Route states from *previous* are kept (the same objects) for ids still
    in the new hierarchy. New ids get ``RouteState.initial``. Ids that left
    the hierarchy are dropped.
    """
    match = match_hierarchy(
        location.pathname,
        compiled.hierarchy_map,
        branches=compiled.branches,
        config=config,
    )
    previous_states = previous.route_states if previous is not None else {}

    route_states: dict[str, RouteState] = {}
    for route in routes_for_hierarchy(match.hierarchy, compiled.routes, partial=match.branch):
        kept = previous_states.get(route.id)
        route_states[route.id] = kept if kept is not None else RouteState.initial(route)

    return RouterState(
        compiled=compiled,
        location=location,
        match=match,
        route_states=MappingProxyType(route_states),
    )


StateListener: TypeAlias = Callable[[RouterState], None]


class RouterStore:
    """Holds the current ``RouterState``.

    Every write is a ``previous -> next`` transition applied to the latest
    state, so concurrent preload completions compose instead of
    overwriting each other with stale snapshots.
    """

    __slots__ = ("_listeners", "_state")

    def __init__(self, state: RouterState) -> None:
        self._state = state
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> RouterState:
        return self._state

    def update(self, transition: Callable[[RouterState], RouterState]) -> RouterState:
        """Apply *transition* to the current state and notify subscribers.

        A transition that returns the state unchanged notifies nobody.
        """
        previous = self._state
        state = transition(previous)
        if state is previous:
            return state
        self._state = state
        for listener in list(self._listeners):
            listener(state)
        return state

    def set_route_state(self, route_id: str, route_state: RouteState) -> RouterState:
        return self.update(lambda state: state.with_route_state(route_id, route_state))

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* after every state change. Returns an unsubscriber."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
