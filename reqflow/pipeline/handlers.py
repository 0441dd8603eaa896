"""Pluggable handler functions consulted on every request.

A ``HandlerRegistry`` is passed explicitly to ``HttpService``; there is no
process-wide registry. Registries are immutable: ``override`` returns a new
one, so a request always sees one consistent set of handlers.
"""

from collections.abc import Awaitable, Callable, Collection, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from reqflow.classify.constants import DEFAULT_CODE_KEYS, DEFAULT_SUCCESS_CODES
from reqflow.classify.models import LogicalOutcome
from reqflow.pipeline.models import RequestSpec
from reqflow.proxy.models import ProxyRule


if TYPE_CHECKING:
    from reqflow.pipeline.errors import PipelineError


ConfigHandler = Callable[[RequestSpec], RequestSpec]
HeadersHandler = Callable[[RequestSpec], Mapping[str, Any]]
DefaultParamsHandler = Callable[[RequestSpec], Mapping[str, Any]]
ProxyTableHandler = Callable[[], Mapping[str, ProxyRule | Mapping[str, Any]]]
InterceptHandler = Callable[[RequestSpec], bool]
ErrorHandler = Callable[["PipelineError", RequestSpec], None]
CodeKeysHandler = Callable[[], Sequence[str]]
SuccessCodesHandler = Callable[[], Collection[Any]]
AroundHandler = Callable[
    [Awaitable[LogicalOutcome], RequestSpec], Awaitable[LogicalOutcome]
]


def _identity_config(spec: RequestSpec) -> RequestSpec:
    return spec


def _no_headers(spec: RequestSpec) -> Mapping[str, Any]:  # noqa: ARG001
    return {}


def _no_default_params(spec: RequestSpec) -> Mapping[str, Any]:  # noqa: ARG001
    return {}


def _empty_proxy_table() -> Mapping[str, ProxyRule]:
    return {}


def _never_intercept(spec: RequestSpec) -> bool:  # noqa: ARG001
    return False


def _ignore_error(error: "PipelineError", spec: RequestSpec) -> None:  # noqa: ARG001
    return None


def _default_code_keys() -> Sequence[str]:
    return DEFAULT_CODE_KEYS


def _default_success_codes() -> Collection[Any]:
    return DEFAULT_SUCCESS_CODES


def _passthrough(
    call: Awaitable[LogicalOutcome],
    spec: RequestSpec,  # noqa: ARG001
) -> Awaitable[LogicalOutcome]:
    return call


@dataclass(frozen=True)
class HandlerRegistry:
    """Handler functions with their default behavior.

    Attributes:
        config: Normalizes or augments the spec before dispatch.
        headers: Extra headers merged over the spec's headers.
        default_params: Parameters the caller's params are merged over.
        proxy_table: Route-prefix table, fetched fresh on every request.
        pre_send_intercept: Returns True to reject the request unsent.
        on_error: Called with the typed error of every failed request.
        code_keys: Ordered body fields holding the application code.
        success_codes: Application codes meaning success.
        around: Wraps the awaitable of every call.
    """

    config: ConfigHandler = _identity_config
    headers: HeadersHandler = _no_headers
    default_params: DefaultParamsHandler = _no_default_params
    proxy_table: ProxyTableHandler = _empty_proxy_table
    pre_send_intercept: InterceptHandler = _never_intercept
    on_error: ErrorHandler = _ignore_error
    code_keys: CodeKeysHandler = _default_code_keys
    success_codes: SuccessCodesHandler = _default_success_codes
    around: AroundHandler = _passthrough

    def override(self, **handlers: Callable[..., Any]) -> "HandlerRegistry":
        """Return a copy with some handlers replaced.

        Args:
            **handlers: Handler name to replacement function.

        Returns:
            New registry.

        Raises:
            TypeError: If a name is not a known handler.
        """
        return replace(self, **handlers)
