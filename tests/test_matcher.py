"""Tests for wayfinder.routing.matcher — first-declared-wins matching."""

import logging

import pytest

from wayfinder.config import RouterConfig
from wayfinder.routing.hierarchy import compile_routes
from wayfinder.routing.matcher import match_hierarchy
from wayfinder.routing.route import NO_MATCH, RouteDeclaration


def _view(route, state, children):
    return route.match


def _match(routes, path: str, config: RouterConfig | None = None):
    compiled = compile_routes(routes, config)
    return compiled, match_hierarchy(
        path, compiled.hierarchy_map, branches=compiled.branches, config=config
    )


class TestNestedMatch:
    def test_users_id(self) -> None:
        compiled, match = _match(
            [RouteDeclaration("/users", children=[RouteDeclaration("/:id", view=_view)])],
            "/users/42",
        )
        users = compiled.routes[0]
        user = users.children[0]

        assert match.hierarchy == (users.id, user.id)
        assert match.params == {"id": "42"}
        assert match.template == "/users/:id"
        assert match.branch is False
        assert match.found is True

    def test_branch_matched_directly(self) -> None:
        compiled, match = _match(
            [RouteDeclaration("/users", children=[RouteDeclaration("/:id", view=_view)])],
            "/users",
        )
        assert match.hierarchy == (compiled.routes[0].id,)
        assert match.branch is True


class TestPrecedence:
    def test_param_declared_first_wins(self) -> None:
        compiled, match = _match(
            [
                RouteDeclaration("/users/:id", view=_view),
                RouteDeclaration("/users/new", view=_view),
            ],
            "/users/new",
        )
        assert match.hierarchy == (compiled.routes[0].id,)
        assert match.params == {"id": "new"}

    def test_literal_declared_first_wins(self) -> None:
        compiled, match = _match(
            [
                RouteDeclaration("/users/new", view=_view),
                RouteDeclaration("/users/:id", view=_view),
            ],
            "/users/new",
        )
        assert match.hierarchy == (compiled.routes[0].id,)
        assert match.params == {}

    def test_wildcard_declared_first_shadows_everything(self) -> None:
        compiled, match = _match(
            [RouteDeclaration("*", view=_view), RouteDeclaration("/users", view=_view)],
            "/users",
        )
        assert match.hierarchy == (compiled.routes[0].id,)


class TestCatchAll:
    @pytest.mark.parametrize("path", ["/", "/users", "/a/b/c", "/users/42/edit", ""])
    def test_every_path_matches_with_catch_all(self, path: str) -> None:
        _, match = _match(
            [
                RouteDeclaration("/users", children=[RouteDeclaration("/:id", view=_view)]),
                RouteDeclaration("*", view=_view),
            ],
            path,
        )
        assert match.found

    def test_catch_all_has_no_params(self) -> None:
        compiled, match = _match(
            [RouteDeclaration("/a", view=_view), RouteDeclaration("*", view=_view)],
            "/zzz",
        )
        assert match.hierarchy == (compiled.routes[1].id,)
        assert match.params is None
        assert match.template == "*"


class TestNoMatch:
    def test_returns_empty_hierarchy(self) -> None:
        _, match = _match([RouteDeclaration("/a", view=_view)], "/b")
        assert match is NO_MATCH
        assert match.hierarchy == ()
        assert match.found is False

    def test_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wayfinder.routing"):
            _match([RouteDeclaration("/a", view=_view)], "/b")
        assert "No route found for '/b'" in caplog.text

    def test_logging_can_be_disabled(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wayfinder.routing"):
            _match([RouteDeclaration("/a", view=_view)], "/b", RouterConfig(log_unmatched=False))
        assert caplog.records == []


class TestCatchAllWithChildren:
    def _routes(self) -> list[RouteDeclaration]:
        return [RouteDeclaration("*", view=_view, children=[RouteDeclaration("/x", view=_view)])]

    def test_catch_all_is_a_branch(self) -> None:
        compiled, match = _match(self._routes(), "/y")
        assert match.hierarchy == (compiled.routes[0].id,)
        assert match.branch is True
