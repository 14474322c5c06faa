"""Tests for wayfinder.views — identity-preserving view composition."""

import logging
from collections.abc import Awaitable, Callable

import pytest

from wayfinder.errors import PreloadError, RouteStateMissing
from wayfinder.location import RouterLocation
from wayfinder.navigation import LocationChanger
from wayfinder.routing.hierarchy import compile_routes
from wayfinder.routing.route import RouteDeclaration
from wayfinder.state import RouterStore, compute_state
from wayfinder.views import RouteView, ViewComposer


def _tag(route, state, children):
    inner = children if children is not None else ""
    return f"<{route.match.strip('/')}>{inner}</>"


async def _allow(context):
    return None


async def _load_user(context):
    return {"name": "ada"}


async def _broken(context):
    raise RuntimeError("backend down")


def _routes() -> list[RouteDeclaration]:
    return [
        RouteDeclaration(
            "/a",
            view=_tag,
            guards=[_allow],
            children=[
                RouteDeclaration(
                    "/b",
                    view=_tag,
                    children=[
                        RouteDeclaration("/c", view=_tag, resolvers=[{"user": _load_user}]),
                        RouteDeclaration("/d", view=_tag),
                        RouteDeclaration("/broken", view=_tag, resolvers=[{"x": _broken}]),
                    ],
                ),
            ],
        ),
        RouteDeclaration("/bare", children=[RouteDeclaration("/leaf", view=_tag)]),
    ]


class _Spawner:
    """Collects spawned preloads so tests can run them when they choose."""

    def __init__(self) -> None:
        self.spawned: list[Callable[[], Awaitable[None]]] = []

    def __call__(self, preload: Callable[[], Awaitable[None]]) -> None:
        self.spawned.append(preload)

    async def run_all(self) -> None:
        while self.spawned:
            await self.spawned.pop(0)()


def _setup(href: str) -> tuple[RouterStore, LocationChanger, _Spawner, ViewComposer]:
    store = RouterStore(compute_state(compile_routes(_routes()), RouterLocation.from_href(href)))
    changer = LocationChanger(store)
    spawner = _Spawner()
    return store, changer, spawner, ViewComposer(store, changer, spawn=spawner)


class TestCompose:
    def test_shared_ancestors_keep_their_views(self) -> None:
        store, changer, _, composer = _setup("/a/b/c")
        a, b, c = composer.compose()

        changer(pathname="/a/b/d")
        a2, b2, d = composer.compose()

        assert a2 is a
        assert b2 is b
        assert d is not c
        assert c.mounted is False
        assert composer.cached_ids == (a.route.id, b.route.id, d.route.id)

    def test_leaving_the_tree_evicts_everything(self) -> None:
        store, changer, _, composer = _setup("/a/b/c")
        views = composer.compose()

        changer(pathname="/nowhere")

        assert composer.compose() == ()
        assert composer.cached_ids == ()
        assert all(not view.mounted for view in views)

    def test_only_incomplete_routes_preload(self) -> None:
        store, _, spawner, composer = _setup("/a/b/c")
        a, b, c = composer.compose()

        # /a has a guard, /c has a resolver, /b has neither
        assert len(spawner.spawned) == 2
        assert a.preloading
        assert not b.preloading
        assert c.preloading

    def test_compose_twice_does_not_respawn(self) -> None:
        _, _, spawner, composer = _setup("/a/b/c")
        composer.compose()
        composer.compose()
        assert len(spawner.spawned) == 2

    def test_clear(self) -> None:
        _, _, _, composer = _setup("/a/b/c")
        views = composer.compose()
        composer.clear()
        assert composer.cached_ids == ()
        assert all(not view.mounted for view in views)


class TestPreload:
    async def test_spawned_preload_completes_route(self) -> None:
        store, _, spawner, composer = _setup("/a/b/c")
        a, b, c = composer.compose()

        await spawner.run_all()

        assert store.state.route_states[a.route.id].completed
        assert store.state.route_states[c.route.id].resolved_data == {"user": {"name": "ada"}}
        assert not c.preloading

    async def test_failing_resolver_records_error(self, caplog: pytest.LogCaptureFixture) -> None:
        store, _, spawner, composer = _setup("/a/b/broken")
        *_, broken = composer.compose()

        with caplog.at_level(logging.ERROR, logger="wayfinder.views"):
            await spawner.run_all()

        state = store.state.route_states[broken.route.id]
        assert state.completed is False
        assert state.loading is False
        assert isinstance(state.error, PreloadError)
        assert isinstance(state.error.__cause__, RuntimeError)
        assert "Preload of route" in caplog.text

    async def test_failed_route_is_not_retried(self) -> None:
        store, _, spawner, composer = _setup("/a/b/broken")
        composer.compose()
        await spawner.run_all()

        fresh = ViewComposer(store, lambda **kw: None, spawn=spawner)
        fresh.compose()
        # /a completed, /b never needed a preload and /broken failed
        assert spawner.spawned == []

    async def test_unmounted_view_discards_its_result(self) -> None:
        store, _, spawner, composer = _setup("/a/b/c")
        *_, c = composer.compose()
        c.unmount()

        await spawner.run_all()

        state = store.state.route_states[c.route.id]
        assert state.loading is True
        assert state.completed is False

    async def test_result_after_navigating_away_is_dropped(self) -> None:
        store, changer, spawner, composer = _setup("/a/b/c")
        *_, c = composer.compose()

        changer(pathname="/a/b/d")
        composer.compose()
        await spawner.run_all()

        assert c.route.id not in store.state.route_states


class TestRender:
    def test_parent_wraps_child(self) -> None:
        _, _, _, composer = _setup("/a/b/c")
        assert composer.render() == "<a><b><c></></></>"

    def test_route_without_view_passes_through(self) -> None:
        _, _, _, composer = _setup("/bare/leaf")
        assert composer.render() == "<leaf></>"

    def test_no_match_renders_nothing(self) -> None:
        _, _, _, composer = _setup("/nowhere")
        assert composer.render() is None

    def test_branch_match_renders_branch(self) -> None:
        _, _, _, composer = _setup("/a/b")
        assert composer.render() == "<a><b></></>"

    def test_inactive_route_state_missing(self) -> None:
        store, _, _, _ = _setup("/a/b/c")
        other = store.state.compiled.routes[1].children[0]
        view = RouteView(other, store, lambda **kw: None)
        with pytest.raises(RouteStateMissing):
            view.render()


class TestRouteView:
    def test_mount_without_spawn(self) -> None:
        store, _, _, _ = _setup("/a/b/c")
        view = RouteView(store.state.active_routes()[0], store, lambda **kw: None)
        assert view.mount(None) is False
        assert view.mounted is False

    def test_repr(self) -> None:
        store, _, _, _ = _setup("/a/b/c")
        route = store.state.active_routes()[0]
        view = RouteView(route, store, lambda **kw: None)
        assert repr(view) == f"<RouteView '/a' id={route.id} mounted=False>"


class TestPreloadLocation:
    async def test_preload_sees_the_location_at_mount(self) -> None:
        seen: list[RouterLocation] = []

        async def record(context):
            seen.append(context.location)

        compiled = compile_routes([RouteDeclaration("/r", view=_tag, resolvers=[{"loc": record}])])
        store = RouterStore(compute_state(compiled, RouterLocation("/r")))
        changer = LocationChanger(store)
        spawner = _Spawner()
        ViewComposer(store, changer, spawn=spawner).compose()

        changer(search={"page": 2})
        await spawner.run_all()

        assert store.state.location == RouterLocation("/r", "?page=2")
        assert seen == [RouterLocation("/r")]
