"""Shared fixtures for the wayfinder test suite."""

import sys
import types

import pytest

from wayfinder.routing.route import RouteDeclaration


def _view(route, state, children):
    return route.match


@pytest.fixture
def fake_routes_module(monkeypatch: pytest.MonkeyPatch) -> str:
    """Register a module holding route declarations on sys.modules."""
    mod = types.ModuleType("_fake_wayfinder_routes")
    mod.routes = [  # type: ignore[attr-defined]
        RouteDeclaration("/users", view=_view, children=[RouteDeclaration("/:id", view=_view)]),
        RouteDeclaration("*", view=_view),
    ]
    mod.no_catch_all = [RouteDeclaration("/about", view=_view)]  # type: ignore[attr-defined]
    mod.empty = []  # type: ignore[attr-defined]
    mod.make_routes = lambda: [RouteDeclaration("/made", view=_view)]  # type: ignore[attr-defined]
    mod.broken_factory = lambda: 1 / 0  # type: ignore[attr-defined]
    mod.invalid = [RouteDeclaration("/empty")]  # type: ignore[attr-defined]
    mod.not_routes = "just a string"  # type: ignore[attr-defined]
    mod.mixed = [RouteDeclaration("/ok", view=_view), 42]  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_fake_wayfinder_routes", mod)
    return "_fake_wayfinder_routes"
