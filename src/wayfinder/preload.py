"""Guard and resolver pipeline.

Each matched route is preloaded before it is considered complete:

    1. Guards run one after another, in declaration order
    2. Resolver groups run one after another; the resolvers inside a
       group run concurrently (anyio task group)
    3. The merged resolver results become the route's ``resolved_data``

Guards and resolvers receive a ``PreloadContext`` and may be coroutine
functions or plain callables. A guard denies access by calling
``context.redirect(pathname=...)``.

Two drivers use this pipeline: ``preload_path`` resolves a whole matched
hierarchy up front, and ``wayfinder.views.RouteView`` preloads a single
route when its view is mounted.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, TypeAlias

import anyio

from wayfinder.config import RouterConfig
from wayfinder.errors import PreloadError
from wayfinder.location import RouterLocation
from wayfinder.routing.hierarchy import CompiledRoutes, compile_routes
from wayfinder.routing.route import Resolver, Route, RouteDeclaration, needs_preloading
from wayfinder.state import RouterState, RouteState, compute_state

logger = logging.getLogger("wayfinder.preload")

# A location changer: redirect(pathname=None, search=None)
Redirect: TypeAlias = Callable[..., Any]

__all__ = [
    "CancelToken",
    "PreloadContext",
    "RedirectTracker",
    "needs_preloading",
    "preload_path",
    "preload_route",
    "run_guards",
    "run_resolvers",
]


@dataclass(frozen=True, slots=True)
class PreloadContext:
    """What every guard and resolver is called with."""

    route: Route
    location: RouterLocation
    redirect: Redirect


class CancelToken:
    """Cancellation flag for one preload.

    Cancelling does not abort guards or resolvers already running; it only
    stops their result from being written.
    """

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def __repr__(self) -> str:
        return f"<CancelToken cancelled={self._cancelled}>"


class RedirectTracker:
    """A location changer that remembers whether it was called."""

    __slots__ = ("_redirect", "redirected")

    def __init__(self, redirect: Redirect) -> None:
        self._redirect = redirect
        self.redirected = False

    def __call__(
        self,
        pathname: str | None = None,
        search: str | Mapping[str, Any] | None = None,
    ) -> Any:
        self.redirected = True
        return self._redirect(pathname=pathname, search=search)


async def _call(func: Callable[[PreloadContext], Any], context: PreloadContext) -> Any:
    result = func(context)
    if inspect.isawaitable(result):
        result = await result
    return result


def _first_leaf(exc: BaseException) -> BaseException:
    while isinstance(exc, BaseExceptionGroup):
        exc = exc.exceptions[0]
    return exc


async def run_guards(
    context: PreloadContext,
    *,
    tracker: RedirectTracker | None = None,
    short_circuit: bool = False,
) -> None:
    """Run the route's guards sequentially.

    A redirect does not stop the chain unless *short_circuit* is set, in
    which case the guards after the redirecting one are skipped.

    Raises ``PreloadError`` if a guard raises.
    """
    route = context.route
    for index, guard in enumerate(route.guards):
        if short_circuit and tracker is not None and tracker.redirected:
            skipped = len(route.guards) - index
            logger.debug("Skipping %d guards of route %s after redirect", skipped, route.id)
            return
        try:
            await _call(guard, context)
        except Exception as exc:
            raise PreloadError(route.id, "guard", str(exc)) from exc


async def _resolve_into(
    results: dict[str, Any],
    key: str,
    resolver: Resolver,
    context: PreloadContext,
) -> None:
    results[key] = await _call(resolver, context)


async def run_resolvers(context: PreloadContext) -> dict[str, Any]:
    """Run the route's resolver groups and merge their results.

    Group *N + 1* starts after every resolver of group *N* has finished.
    Later groups overwrite keys set by earlier ones.

    Raises ``PreloadError`` if any resolver raises; nothing is returned
    for the route in that case.
    """
    route = context.route
    resolved: dict[str, Any] = {}

    for group in route.resolvers:
        results: dict[str, Any] = {}
        try:
            async with anyio.create_task_group() as tg:
                for key, resolver in group.items():
                    tg.start_soon(_resolve_into, results, key, resolver, context)
        except Exception as exc:
            cause = _first_leaf(exc)
            raise PreloadError(route.id, "resolve", str(cause)) from cause

        resolved.update((key, results[key]) for key in group)

    return resolved


async def preload_route(
    route: Route,
    location: RouterLocation,
    redirect: Redirect,
    on_complete: Callable[[RouteState], None] | None = None,
    *,
    token: CancelToken | None = None,
    config: RouterConfig | None = None,
) -> RouteState | None:
    """Guard and resolve one route.

    Returns the completed ``RouteState`` and passes it to *on_complete*.
    Returns ``None`` without calling *on_complete* when *token* was
    cancelled meanwhile, or when a guard redirected and
    ``config.short_circuit_redirects`` is set.
    """
    config = config or RouterConfig()
    tracker = RedirectTracker(redirect)
    context = PreloadContext(route=route, location=location, redirect=tracker)

    await run_guards(context, tracker=tracker, short_circuit=config.short_circuit_redirects)
    if config.short_circuit_redirects and tracker.redirected:
        logger.debug("Route %s redirected during guards; skipping resolvers", route.id)
        return None

    resolved = await run_resolvers(context)

    if token is not None and token.cancelled:
        logger.debug("Preload of route %s was cancelled; discarding result", route.id)
        return None

    state = RouteState(loading=False, resolved_data=MappingProxyType(resolved), completed=True)
    if on_complete is not None:
        on_complete(state)
    return state


async def preload_path(
    routes: Sequence[RouteDeclaration | Route] | CompiledRoutes,
    location: RouterLocation,
    redirect: Redirect,
    *,
    config: RouterConfig | None = None,
) -> RouterState | None:
    """Preload every route matched by *location*, root first.

    Each route's guards and resolvers finish before the next route
    starts. If a guard redirects, no deeper route is preloaded and
    ``None`` is returned. Otherwise the returned state has every matched
    route completed and can be handed to ``Router(initial_state=...)``.

    Raises ``PreloadError`` if a guard or resolver fails.
    """
    config = config or RouterConfig()
    compiled = routes if isinstance(routes, CompiledRoutes) else compile_routes(routes, config)
    state = compute_state(compiled, location, config=config)
    tracker = RedirectTracker(redirect)

    for route in state.active_routes():
        if tracker.redirected:
            break
        if state.route_states[route.id].completed:
            continue
        route_state = await preload_route(route, location, tracker, config=config)
        if route_state is not None:
            state = state.with_route_state(route.id, route_state)

    if tracker.redirected:
        logger.info("Redirected while preloading %r", location.href)
        return None
    return state
