"""Tests for wayfinder.routing.params — path template compilation."""

import pytest

from wayfinder.errors import InvalidRouteDeclaration
from wayfinder.routing.params import compile_template, matches_template


class TestLiteralTemplates:
    def test_exact_match(self) -> None:
        assert compile_template("/users").match("/users") == {}

    def test_no_match(self) -> None:
        assert compile_template("/users").match("/posts") is None

    def test_prefix_is_not_a_match(self) -> None:
        assert compile_template("/users").match("/users/42") is None

    def test_trailing_slash_allowed_by_default(self) -> None:
        assert compile_template("/users").match("/users/") == {}

    def test_strict_rejects_trailing_slash(self) -> None:
        assert compile_template("/users", strict=True).match("/users/") is None

    def test_case_insensitive_by_default(self) -> None:
        assert compile_template("/Users").match("/users") == {}

    def test_case_sensitive(self) -> None:
        assert compile_template("/Users", case_sensitive=True).match("/users") is None

    def test_regex_characters_are_literal(self) -> None:
        assert compile_template("/a.b").match("/axb") is None
        assert compile_template("/a.b").match("/a.b") == {}

    def test_root(self) -> None:
        assert compile_template("/").match("/") == {}


class TestParameters:
    def test_named_param(self) -> None:
        assert compile_template("/users/:id").match("/users/42") == {"id": "42"}

    def test_param_does_not_cross_segments(self) -> None:
        assert compile_template("/users/:id").match("/users/42/posts") is None

    def test_multiple_params(self) -> None:
        params = compile_template("/users/:user_id/posts/:post_id").match("/users/1/posts/2")
        assert params == {"user_id": "1", "post_id": "2"}

    def test_params_inside_one_segment(self) -> None:
        params = compile_template("/files/:name.:ext").match("/files/report.pdf")
        assert params == {"name": "report", "ext": "pdf"}

    def test_param_names_in_order(self) -> None:
        compiled = compile_template("/a/:first/b/:second")
        assert compiled.param_names == ("first", "second")

    def test_duplicate_param_rejected(self) -> None:
        with pytest.raises(InvalidRouteDeclaration, match="duplicate parameter 'id'"):
            compile_template("/a/:id/b/:id")


class TestModifiers:
    def test_optional_present(self) -> None:
        assert compile_template("/users/:id?").match("/users/7") == {"id": "7"}

    def test_optional_absent_is_omitted(self) -> None:
        assert compile_template("/users/:id?").match("/users") == {}

    def test_zero_or_more(self) -> None:
        compiled = compile_template("/files/:path*")
        assert compiled.match("/files") == {}
        assert compiled.match("/files/a/b/c") == {"path": "a/b/c"}

    def test_one_or_more(self) -> None:
        compiled = compile_template("/files/:path+")
        assert compiled.match("/files") is None
        assert compiled.match("/files/a/b") == {"path": "a/b"}

    def test_bare_star_matches_rest(self) -> None:
        compiled = compile_template("/docs/*")
        assert compiled.match("/docs") == {}
        assert compiled.match("/docs/guide/intro") == {}
        assert compiled.match("/docsx") is None


class TestMatchesTemplate:
    def test_match(self) -> None:
        assert matches_template("/users/42", "/users/:id") == (True, {"id": "42"})

    def test_no_match(self) -> None:
        assert matches_template("/posts", "/users/:id") == (False, None)

    def test_compiled_templates_are_cached(self) -> None:
        assert compile_template("/cached/:id") is compile_template("/cached/:id")
