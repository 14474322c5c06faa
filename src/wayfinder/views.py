"""View composition with identity-preserving wrappers.

Each matched route is wrapped in a ``RouteView`` that owns the route's
incremental preload. Wrappers are cached by route id and reused while the
route stays matched, so a parent layout shared by two locations keeps its
wrapper (and its preload) across the navigation. Rendering nests the
outputs: the leaf renders first and each parent wraps its child.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any, TypeAlias

from wayfinder.config import RouterConfig
from wayfinder.errors import PreloadError, RouteStateMissing
from wayfinder.location import RouterLocation
from wayfinder.preload import CancelToken, Redirect, preload_route
from wayfinder.routing.route import Route
from wayfinder.state import RouterState, RouterStore, RouteState

logger = logging.getLogger("wayfinder.views")

# Schedules a preload coroutine function on the router's task group
Spawn: TypeAlias = Callable[[Callable[[], Awaitable[None]]], None]


class RouteView:
    """Wraps one route: triggers its preload and renders its view.

    ``mount`` starts a preload when the route state is neither completed
    nor failed. ``unmount`` cancels it, so a result arriving after the
    route left the hierarchy is discarded.
    """

    __slots__ = ("_config", "_redirect", "_store", "_token", "mounted", "route")

    def __init__(
        self,
        route: Route,
        store: RouterStore,
        redirect: Redirect,
        config: RouterConfig | None = None,
    ) -> None:
        self.route = route
        self.mounted = False
        self._store = store
        self._redirect = redirect
        self._config = config or RouterConfig()
        self._token: CancelToken | None = None

    @property
    def state(self) -> RouteState | None:
        return self._store.state.route_states.get(self.route.id)

    @property
    def preloading(self) -> bool:
        return self._token is not None and not self._token.cancelled

    def mount(self, spawn: Spawn | None) -> bool:
        """Mount the view. Returns whether a preload was started.

        Without *spawn* the view stays unmounted and a later call can
        mount it.
        """
        if self.mounted or spawn is None:
            return False
        self.mounted = True

        state = self.state
        if state is None or state.completed or state.error is not None:
            return False

        self._token = CancelToken()
        spawn(partial(self._preload, self._token, self._store.state.location))
        return True

    def unmount(self) -> None:
        self.mounted = False
        if self._token is not None:
            self._token.cancel()
            self._token = None

    async def _preload(self, token: CancelToken, location: RouterLocation) -> None:
        route = self.route
        try:
            await preload_route(
                route,
                location,
                self._redirect,
                partial(self._store.set_route_state, route.id),
                token=token,
                config=self._config,
            )
        except PreloadError as exc:
            logger.exception("Preload of route %s failed at %r", route.id, location.href)
            if not token.cancelled:
                self._store.set_route_state(route.id, RouteState(loading=False, error=exc))
        finally:
            if self._token is token:
                self._token = None

    def render(self, children: Any = None) -> Any:
        """Render the route's view around *children*.

        Routes without a view pass *children* through.
        """
        if self.route.view is None:
            return children
        state = self.state
        if state is None:
            raise RouteStateMissing(self.route.id)
        return self.route.view(self.route, state, children)

    def __repr__(self) -> str:
        return f"<RouteView {self.route.match!r} id={self.route.id} mounted={self.mounted}>"


class ViewComposer:
    """Maps the matched hierarchy to cached ``RouteView`` wrappers.

    Usage::

        composer = ViewComposer(store, changer, spawn=spawn)
        output = composer.render()
    """

    __slots__ = ("_cache", "_config", "_redirect", "_store", "spawn")

    def __init__(
        self,
        store: RouterStore,
        redirect: Redirect,
        *,
        spawn: Spawn | None = None,
        config: RouterConfig | None = None,
    ) -> None:
        self._store = store
        self._redirect = redirect
        self._config = config or RouterConfig()
        self._cache: dict[str, RouteView] = {}
        self.spawn = spawn

    @property
    def cached_ids(self) -> tuple[str, ...]:
        return tuple(self._cache)

    def compose(self, state: RouterState | None = None) -> tuple[RouteView, ...]:
        """Return the wrappers for the matched routes, root first.

        Wrappers of routes that left the hierarchy are unmounted and
        evicted; wrappers of routes still matched are reused.
        """
        state = state or self._store.state
        hierarchy = state.match.hierarchy

        for route_id in [rid for rid in self._cache if rid not in hierarchy]:
            logger.debug("Evicting view for route %s", route_id)
            self._cache.pop(route_id).unmount()

        views: list[RouteView] = []
        for route in state.active_routes():
            view = self._cache.get(route.id)
            if view is None:
                view = RouteView(route, self._store, self._redirect, self._config)
                self._cache[route.id] = view
            views.append(view)

        for view in views:
            view.mount(self.spawn)

        return tuple(views)

    def render(self, state: RouterState | None = None) -> Any:
        """Compose and render, leaf first. Returns ``None`` when nothing matched."""
        output: Any = None
        for view in reversed(self.compose(state)):
            output = view.render(output)
        return output

    def clear(self) -> None:
        """Unmount and evict every cached view."""
        for view in self._cache.values():
            view.unmount()
        self._cache.clear()
