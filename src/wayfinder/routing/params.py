"""Path template compilation and parameter extraction.

Templates are compiled once into anchored regular expressions and cached
by template string. Supported syntax::

    "/users"              -> literal
    "/users/:id"          -> one segment captured as ``id``
    "/users/:id?"         -> optional segment
    "/files/:path*"       -> zero or more segments
    "/files/:path+"       -> one or more segments
    "/docs/*"             -> anything below /docs, no parameter

The bare ``"*"`` catch-all template is handled by the matcher and never
reaches this module.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import TypeAlias

from wayfinder.errors import InvalidRouteDeclaration

# The params parsed from a template match, or None for the catch-all
MatchParams: TypeAlias = dict[str, str] | None

_SEGMENT = r"[^/#?]+?"

_TOKEN_RE = re.compile(
    r"(?P<prefix>/?)(?:(?P<star>\*)|:(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?P<modifier>[?*+])?)"
)


@dataclass(frozen=True, slots=True)
class PathTemplate:
    """A compiled path template.

    Attributes:
        template: The source template string.
        regex: Anchored pattern with one named group per parameter.
        param_names: Parameter names in template order.
    """

    template: str
    regex: re.Pattern[str]
    param_names: tuple[str, ...]

    def match(self, path: str) -> dict[str, str] | None:
        """Return the captured params, or ``None`` if *path* does not match.

        Optional parameters that did not capture are omitted.
        """
        m = self.regex.match(path)
        if m is None:
            return None
        return {name: value for name, value in m.groupdict().items() if value is not None}


def _build_pattern(template: str, *, strict: bool) -> tuple[str, tuple[str, ...]]:
    parts: list[str] = ["^"]
    names: list[str] = []
    pos = 0

    for token in _TOKEN_RE.finditer(template):
        parts.append(re.escape(template[pos : token.start()]))
        pos = token.end()
        prefix = re.escape(token["prefix"])

        if token["star"]:
            parts.append(f"(?:{prefix}.*)?")
            continue

        name = token["name"]
        if name in names:
            raise InvalidRouteDeclaration(template, f"duplicate parameter {name!r}")
        names.append(name)

        modifier = token["modifier"]
        if modifier is None:
            parts.append(f"{prefix}(?P<{name}>{_SEGMENT})")
        elif modifier == "?":
            parts.append(f"(?:{prefix}(?P<{name}>{_SEGMENT}))?")
        elif modifier == "+":
            parts.append(f"{prefix}(?P<{name}>{_SEGMENT}(?:/{_SEGMENT})*)")
        else:
            parts.append(f"(?:{prefix}(?P<{name}>{_SEGMENT}(?:/{_SEGMENT})*))?")

    parts.append(re.escape(template[pos:]))
    if not strict:
        parts.append("/?")
    parts.append("$")
    return "".join(parts), tuple(names)


@lru_cache(maxsize=1024)
def compile_template(
    template: str,
    *,
    case_sensitive: bool = False,
    strict: bool = False,
) -> PathTemplate:
    """Compile *template* into a :class:`PathTemplate`.

    Raises ``InvalidRouteDeclaration`` if the template is malformed.
    """
    pattern, names = _build_pattern(template, strict=strict)
    flags = 0 if case_sensitive else re.IGNORECASE
    return PathTemplate(template=template, regex=re.compile(pattern, flags), param_names=names)


def matches_template(
    path: str,
    template: str,
    *,
    case_sensitive: bool = False,
    strict: bool = False,
) -> tuple[bool, MatchParams]:
    """Check *path* against *template*, returning ``(matched, params)``."""
    params = compile_template(template, case_sensitive=case_sensitive, strict=strict).match(path)
    if params is None:
        return False, None
    return True, params
