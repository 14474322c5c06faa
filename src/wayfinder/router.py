"""The router: compiled routes, state store, history sync and views.

Usage::

    from wayfinder import MemoryHistory, RouteDeclaration, Router

    routes = [
        RouteDeclaration("/users", view=layout, children=[
            RouteDeclaration("/:id", view=user_page, resolvers=[{"user": load_user}]),
        ]),
        RouteDeclaration("*", view=not_found),
    ]

    async with Router(routes, history=MemoryHistory("/users/42")) as router:
        await router.wait_idle()
        router.route_state(router.current_route).resolved_data["user"]
        router.navigate(pathname="/users/7")
        html = router.render()

Outside ``async with`` the router still matches, navigates and renders,
but mounted views do not preload.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from types import TracebackType
from typing import Any

import anyio
from anyio.abc import TaskGroup

from wayfinder.config import RouterConfig
from wayfinder.errors import ConfigurationError, NoRouteMatched, RouteStateMissing
from wayfinder.location import LocationSource, MemoryHistory, RouterLocation
from wayfinder.navigation import ClickEvent, HistorySync, Link, LocationChanger
from wayfinder.routing.hierarchy import compile_routes
from wayfinder.routing.params import MatchParams
from wayfinder.routing.route import MatchResult, Route, RouteDeclaration
from wayfinder.state import RouterState, RouterStore, RouteState, StateListener, compute_state
from wayfinder.views import ViewComposer

logger = logging.getLogger("wayfinder.routing")


def _same_declarations(
    left: Sequence[RouteDeclaration | Route],
    right: Sequence[RouteDeclaration | Route],
) -> bool:
    return len(left) == len(right) and all(a is b for a, b in zip(left, right, strict=True))


class Router:
    """Client-side router over a fixed set of route declarations.

    Args:
        routes: Top-level route declarations. Fixed for the router's life.
        history: Host history. Defaults to a ``MemoryHistory`` at ``/``.
        initial_state: A state computed ahead of time, e.g. by
            ``preload_path``, compiled from the same *routes*.
        config: Router configuration.

    Raises:
        InvalidRouteDeclaration: If a route has neither view nor children,
            or a template is malformed.
        ConfigurationError: If *initial_state* was compiled from other
            declarations.
    """

    __slots__ = (
        "_changer",
        "_composer",
        "_declarations",
        "_idle",
        "_pending",
        "_store",
        "_sync",
        "_task_group",
        "config",
        "history",
    )

    def __init__(
        self,
        routes: Sequence[RouteDeclaration | Route],
        *,
        history: LocationSource | None = None,
        initial_state: RouterState | None = None,
        config: RouterConfig | None = None,
    ) -> None:
        self.config = config or RouterConfig()
        self.history: LocationSource = history if history is not None else MemoryHistory()
        self._declarations = tuple(routes)

        if initial_state is not None:
            if not _same_declarations(initial_state.compiled.declarations, self._declarations):
                msg = "initial_state was compiled from a different set of route declarations"
                raise ConfigurationError(msg)
            state = initial_state
        else:
            compiled = compile_routes(self._declarations, self.config)
            state = compute_state(compiled, self.history.read(), config=self.config)

        self._store = RouterStore(state)
        self._changer = LocationChanger(self._store, self.config)
        self._sync = HistorySync(self._store, self.history, self.config)
        self._composer = ViewComposer(self._store, self._changer, config=self.config)
        self._task_group: TaskGroup | None = None
        self._pending = 0
        self._idle: anyio.Event | None = None

        self._store.subscribe(self._on_state)

    # -- Lifecycle --

    @property
    def running(self) -> bool:
        return self._task_group is not None

    async def __aenter__(self) -> Router:
        if self._task_group is not None:
            msg = "Router is already running"
            raise RuntimeError(msg)
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._task_group = task_group

        try:
            self._sync.bind(self._store.state.compiled)
            self._sync.sync()
            self._composer.spawn = self._spawn
            self._composer.compose()
        except BaseException:
            # The group must be closed on the task that opened it
            task_group = self._detach()
            task_group.cancel_scope.cancel()
            await task_group.__aexit__(None, None, None)
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        task_group = self._detach()
        return await task_group.__aexit__(exc_type, exc, tb)

    def _detach(self) -> TaskGroup:
        self._composer.spawn = None
        self._composer.clear()
        self._sync.close()
        task_group, self._task_group = self._task_group, None
        if task_group is None:
            msg = "Router is not running"
            raise RuntimeError(msg)
        return task_group

    def _on_state(self, state: RouterState) -> None:
        self._sync.sync(state)
        if self.running:
            self._composer.compose(state)

    def _spawn(self, preload: Callable[[], Awaitable[None]]) -> None:
        if self._task_group is None:
            msg = "Router is not running"
            raise RuntimeError(msg)
        self._pending += 1
        self._task_group.start_soon(self._run_preload, preload)

    async def _run_preload(self, preload: Callable[[], Awaitable[None]]) -> None:
        try:
            await preload()
        finally:
            self._pending -= 1
            if self._pending == 0 and self._idle is not None:
                self._idle.set()
                self._idle = None

    async def wait_idle(self) -> None:
        """Wait until no incremental preload is in flight."""
        while self._pending:
            if self._idle is None:
                self._idle = anyio.Event()
            await self._idle.wait()

    def load_routes(self, routes: Sequence[RouteDeclaration | Route]) -> None:
        """Accept *routes* only if they are the declarations already loaded.

        Route declarations are fixed for the router's lifetime.
        """
        if not _same_declarations(tuple(routes), self._declarations):
            msg = "Route declarations cannot change after the router is created"
            raise ConfigurationError(msg)

    # -- Read API --

    @property
    def state(self) -> RouterState:
        return self._store.state

    @property
    def location(self) -> RouterLocation:
        return self._store.state.location

    @property
    def match(self) -> MatchResult:
        return self._store.state.match

    @property
    def params(self) -> MatchParams:
        """Params of the current match. Raises ``NoRouteMatched``."""
        return self._current_match().params

    @property
    def current_route(self) -> Route:
        """The deepest matched route. Raises ``NoRouteMatched``."""
        self._current_match()
        return self._store.state.active_routes()[-1]

    def active_routes(self) -> tuple[Route, ...]:
        return self._store.state.active_routes()

    def route_state(self, route: Route | str) -> RouteState:
        """State of an active route. Raises ``RouteStateMissing`` otherwise."""
        route_id = route if isinstance(route, str) else route.id
        try:
            return self._store.state.route_states[route_id]
        except KeyError:
            raise RouteStateMissing(route_id) from None

    def _current_match(self) -> MatchResult:
        state = self._store.state
        if not state.match.found:
            raise NoRouteMatched(state.location.pathname)
        return state.match

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* with every new state. Returns an unsubscriber."""
        return self._store.subscribe(listener)

    # -- Write API --

    def navigate(
        self,
        pathname: str | None = None,
        search: str | Mapping[str, Any] | None = None,
    ) -> RouterState:
        """Move to a new location. Omitted fields keep their value."""
        return self._changer(pathname=pathname, search=search)

    def link(
        self,
        to: str,
        *,
        search: str | Mapping[str, Any] | None = None,
        on_click: Callable[[ClickEvent], None] | None = None,
    ) -> Link:
        return Link(to, self._changer, search=search, on_click=on_click)

    # -- Rendering --

    def render(self) -> Any:
        """Render the matched routes, parent wrapping child.

        Returns ``None`` when no route matched.
        """
        return self._composer.render()

    def __repr__(self) -> str:
        return f"<Router {self.location.href!r} routes={len(self._declarations)}>"
