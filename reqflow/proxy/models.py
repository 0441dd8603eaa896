"""Data models for route-prefix proxying."""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, TypeAlias

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from reqflow.transport.constants import VALID_URL_SCHEMES


class ProxyRule(BaseModel):
    """Where routes under one prefix are sent.

    Attributes:
        target: Base URL the route is joined with.
        rewrite_path: Strip the matched prefix from the route before joining.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    target: str = Field(
        min_length=1,
        validation_alias=AliasChoices("target", "target_base", "targetBase"),
    )
    rewrite_path: bool = Field(
        default=False,
        validation_alias=AliasChoices("rewrite_path", "rewritePath", "pathRewrite"),
    )

    @field_validator("target")
    @classmethod
    def validate_target(cls, v: str) -> str:
        """Ensure the target is an absolute http(s) URL."""
        if not v.startswith(tuple(f"{scheme}://" for scheme in VALID_URL_SCHEMES)):
            msg = f"Proxy target must be an absolute http(s) URL: {v!r}"
            raise ValueError(msg)
        return v


ProxyTable: TypeAlias = Mapping[str, ProxyRule]


def snapshot_table(table: Mapping[str, ProxyRule | Mapping[str, Any]]) -> ProxyTable:
    """Copy a proxy table into a read-only mapping of validated rules.

    Declaration order is preserved. The snapshot is unaffected by later
    mutation of ``table``.

    Args:
        table: Prefix to rule (or rule dict) mapping.

    Returns:
        Immutable prefix to ProxyRule mapping.
    """
    rules: dict[str, ProxyRule] = {}
    for prefix, entry in table.items():
        rules[prefix] = (
            entry if isinstance(entry, ProxyRule) else ProxyRule.model_validate(entry)
        )
    return MappingProxyType(rules)
