"""Location changes, history synchronization and links.

``LocationChanger`` is the single way the router moves: redirects from
guards, ``Router.navigate`` and ``Link`` clicks all go through it.
``HistorySync`` keeps the history collaborator in step with the router:
it pushes an entry when the router moves on its own, and feeds
back/forward moves into the router without pushing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from wayfinder.config import RouterConfig
from wayfinder.location import LocationSource, RouterLocation, merge_location
from wayfinder.routing.hierarchy import CompiledRoutes
from wayfinder.state import RouterState, RouterStore, compute_state

logger = logging.getLogger("wayfinder.history")


class LocationChanger:
    """Move the router to a new location.

    Usage::

        change = LocationChanger(store)
        change(pathname="/settings", search={"tab": "billing"})

    Omitted fields keep their current value. A change that leaves the
    location as it is does not produce a new state.
    """

    __slots__ = ("_config", "_store")

    def __init__(self, store: RouterStore, config: RouterConfig | None = None) -> None:
        self._store = store
        self._config = config or RouterConfig()

    def __call__(
        self,
        pathname: str | None = None,
        search: str | Mapping[str, Any] | None = None,
    ) -> RouterState:
        def transition(state: RouterState) -> RouterState:
            location = merge_location(state.location, pathname=pathname, search=search)
            if location == state.location:
                return state
            logger.debug("Navigating %r -> %r", state.location.href, location.href)
            return compute_state(state.compiled, location, state, config=self._config)

        return self._store.update(transition)


class HistorySync:
    """Keeps a ``LocationSource`` and a ``RouterStore`` in step.

    ``sync`` pushes the router's location when the history is elsewhere.
    ``bind`` subscribes to back/forward notifications for a compiled
    route set, replacing the previous subscription when the set changes.
    """

    __slots__ = ("_bound", "_config", "_history", "_store", "_unsubscribe")

    def __init__(
        self,
        store: RouterStore,
        history: LocationSource,
        config: RouterConfig | None = None,
    ) -> None:
        self._store = store
        self._history = history
        self._config = config or RouterConfig()
        self._bound: CompiledRoutes | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def history(self) -> LocationSource:
        return self._history

    def sync(self, state: RouterState | None = None) -> bool:
        """Push the router location unless the history already shows it.

        Returns whether an entry was pushed.
        """
        location = (state or self._store.state).location
        if self._history.read() == location:
            return False
        self._history.push(location)
        logger.debug("Pushed history entry %r", location.href)
        return True

    def bind(self, compiled: CompiledRoutes) -> None:
        """Listen for back/forward moves, resolving them against *compiled*."""
        if compiled is self._bound:
            return
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._bound = compiled
        self._unsubscribe = self._history.subscribe(self._listener_for(compiled))

    def _listener_for(self, compiled: CompiledRoutes) -> Callable[[], None]:
        def on_history_move() -> None:
            location = self._history.read()
            logger.debug("History moved to %r", location.href)
            self._store.update(
                lambda previous: compute_state(compiled, location, previous, config=self._config)
            )

        return on_history_move

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = None
        self._bound = None


@dataclass(slots=True)
class ClickEvent:
    """The parts of a pointer click a ``Link`` cares about."""

    button: int = 0
    ctrl: bool = False
    meta: bool = False
    alt: bool = False
    shift: bool = False
    default_prevented: bool = False

    @property
    def modified(self) -> bool:
        return self.ctrl or self.meta or self.alt or self.shift

    def prevent_default(self) -> None:
        self.default_prevented = True


class Link:
    """Navigation trigger for an anchor-like element.

    Plain primary clicks are intercepted and turned into a router
    navigation. Modifier clicks (open in new tab, etc.) and other buttons
    are left to the host's default behavior.
    """

    __slots__ = ("_changer", "on_click", "search", "to")

    def __init__(
        self,
        to: str,
        changer: Callable[..., Any],
        *,
        search: str | Mapping[str, Any] | None = None,
        on_click: Callable[[ClickEvent], None] | None = None,
    ) -> None:
        self.to = to
        self.search = search
        self.on_click = on_click
        self._changer = changer

    @property
    def href(self) -> str:
        target = RouterLocation.from_href(self.to)
        if self.search is None:
            return target.href
        return merge_location(target, search=self.search).href

    def click(self, event: ClickEvent | None = None) -> bool:
        """Handle a click. Returns whether the router took it over."""
        event = event or ClickEvent()
        if event.modified or event.button != 0:
            return False

        event.prevent_default()
        target = RouterLocation.from_href(self.to)
        search = self.search if self.search is not None else target.search
        self._changer(pathname=target.pathname, search=search)

        if self.on_click is not None:
            self.on_click(event)
        return True

    def __repr__(self) -> str:
        return f"<Link {self.href!r}>"
