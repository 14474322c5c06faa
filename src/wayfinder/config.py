"""Router configuration.

One frozen RouterConfig is shared by the compiler, matcher, preload
pipeline and router. Pass it once to ``Router``; every component reads the
same instance.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(case_sensitive=True, short_circuit_redirects=True)
    """

    # Matching
    wildcard: str = "*"  # Template that matches every path, with no params
    case_sensitive: bool = False
    strict_slashes: bool = False  # When False, "/users/" matches "/users"

    # Preloading
    # When True, a guard that redirects stops the remaining guards of its route.
    # The default keeps running them to completion.
    short_circuit_redirects: bool = False

    # Route ids
    id_bytes: int = 12  # Entropy for secrets.token_urlsafe

    # Logging
    log_unmatched: bool = True  # Warn on the wayfinder.routing logger when nothing matches
