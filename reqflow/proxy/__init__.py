"""Route-prefix proxy table and URL resolution."""

from reqflow.proxy.models import ProxyRule, ProxyTable, snapshot_table
from reqflow.proxy.router import find_rule, is_http_link, join_url, resolve


__all__ = [
    "ProxyRule",
    "ProxyTable",
    "find_rule",
    "is_http_link",
    "join_url",
    "resolve",
    "snapshot_table",
]
