"""Route-prefix proxy resolution."""

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

import structlog

from reqflow.proxy.models import ProxyRule, snapshot_table
from reqflow.transport.constants import VALID_URL_SCHEMES


logger = structlog.get_logger()


def is_http_link(route: str) -> bool:
    """Check if a route is already an absolute http(s) URL.

    Args:
        route: Route or URL.

    Returns:
        True for URLs with an http(s) scheme and a host.
    """
    parsed = urlparse(route)
    return parsed.scheme in VALID_URL_SCHEMES and bool(parsed.netloc)


def join_url(base: str, path: str) -> str:
    """Join a base URL and a path with exactly one slash between them.

    The base's own path is kept: ``join_url("https://h/v1", "/users")``
    is ``https://h/v1/users``.

    Args:
        base: Absolute base URL, with or without trailing slash.
        path: Path, with or without leading slash. May carry a query.

    Returns:
        Joined URL.
    """
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


def find_rule(route: str, table: Mapping[str, ProxyRule]) -> tuple[str, ProxyRule] | None:
    """Find the first prefix in declaration order that ``route`` starts with.

    Args:
        route: Logical route.
        table: Prefix to rule mapping.

    Returns:
        (prefix, rule) pair, or None if no prefix matches.
    """
    for prefix, rule in table.items():
        if route.startswith(prefix):
            return prefix, rule
    return None


def resolve(route: str, table: Mapping[str, ProxyRule | Mapping[str, Any]]) -> str:
    """Resolve a logical route to a physical URL.

    Absolute URLs pass through without consulting the table. Unmatched
    routes are returned unchanged.

    Args:
        route: Logical route or absolute URL.
        table: Proxy table.

    Returns:
        URL to send the request to.
    """
    if is_http_link(route):
        return route

    match = find_rule(route, snapshot_table(table))
    if match is None:
        return route

    prefix, rule = match
    path = route[len(prefix) :] if rule.rewrite_path else route
    url = join_url(rule.target, path)
    logger.debug(
        "proxy_route_resolved",
        component="proxy",
        route=route,
        prefix=prefix,
        rewrite_path=rule.rewrite_path,
        url=url,
    )
    return url
