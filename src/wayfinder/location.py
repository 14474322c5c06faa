"""Router location and the history collaborator.

``RouterLocation`` is the router's own record of where it is, independent
of how a host environment represents its address bar. The host is reached
through the ``LocationSource`` protocol; ``MemoryHistory`` implements it in
memory for headless use and tests.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlencode, urlsplit


@dataclass(frozen=True, slots=True)
class RouterLocation:
    """Where the router is: a pathname and a search string.

    ``search`` is either empty or starts with ``"?"``.
    """

    pathname: str = "/"
    search: str = ""

    @property
    def href(self) -> str:
        return self.pathname + self.search

    @classmethod
    def from_href(cls, href: str) -> RouterLocation:
        """Parse ``"/path?query"`` into a location. Fragments are dropped."""
        parts = urlsplit(href)
        return cls(pathname=parts.path or "/", search=f"?{parts.query}" if parts.query else "")


def build_search_string(search: str | Mapping[str, Any]) -> str:
    """Normalize *search* into a ``"?..."`` string.

    Strings get a leading ``"?"`` when missing. Mappings are encoded with
    keys sorted, sequence values repeated and ``None`` values dropped::

        build_search_string({"tab": "billing"})  # "?tab=billing"
        build_search_string("tab=billing")       # "?tab=billing"

    An empty string or mapping yields ``""``.
    """
    if isinstance(search, str):
        if not search or search == "?":
            return ""
        return search if search.startswith("?") else f"?{search}"

    items = [(key, value) for key, value in sorted(search.items()) if value is not None]
    if not items:
        return ""
    return "?" + urlencode(items, doseq=True)


def merge_location(
    current: RouterLocation,
    *,
    pathname: str | None = None,
    search: str | Mapping[str, Any] | None = None,
) -> RouterLocation:
    """Return *current* with the supplied fields replaced.

    Fields left as ``None`` are kept. ``search=""`` clears the query.
    """
    return RouterLocation(
        pathname=current.pathname if pathname is None else pathname,
        search=current.search if search is None else build_search_string(search),
    )


@runtime_checkable
class LocationSource(Protocol):
    """The host's history: read the current entry, push new ones, and
    hear about back/forward moves.

    ``subscribe`` returns a callable that removes the subscription.
    Listeners take no arguments; they call ``read()`` to learn the new
    location.
    """

    def read(self) -> RouterLocation: ...

    def push(self, location: RouterLocation) -> None: ...

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]: ...


class MemoryHistory:
    """An in-memory history stack.

    ``push`` drops forward entries and does not notify listeners.
    ``back``, ``forward`` and ``go`` move through the stack and notify
    listeners, like a browser's back/forward buttons.

    Usage::

        history = MemoryHistory("/users/42")
        history.push(RouterLocation("/settings"))
        history.back()
        history.read()  # RouterLocation(pathname="/users/42", search="")
    """

    __slots__ = ("_entries", "_index", "_listeners")

    def __init__(self, initial: str | RouterLocation = "/") -> None:
        if isinstance(initial, str):
            initial = RouterLocation.from_href(initial)
        self._entries: list[RouterLocation] = [initial]
        self._index = 0
        self._listeners: list[Callable[[], None]] = []

    @property
    def entries(self) -> tuple[RouterLocation, ...]:
        return tuple(self._entries)

    @property
    def index(self) -> int:
        return self._index

    def read(self) -> RouterLocation:
        return self._entries[self._index]

    def push(self, location: RouterLocation) -> None:
        del self._entries[self._index + 1 :]
        self._entries.append(location)
        self._index += 1

    def go(self, delta: int) -> bool:
        """Move *delta* entries. Returns ``False`` when out of range."""
        target = self._index + delta
        if delta == 0 or not 0 <= target < len(self._entries):
            return False
        self._index = target
        for listener in list(self._listeners):
            listener()
        return True

    def back(self) -> bool:
        return self.go(-1)

    def forward(self) -> bool:
        return self.go(1)

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def __repr__(self) -> str:
        return f"<MemoryHistory {self.read().href!r} ({self._index + 1}/{len(self._entries)})>"
