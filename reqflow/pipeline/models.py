"""Request models for the pipeline."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reqflow.transport.models import HttpMethod


HeaderValue = str | int | float | bool


class RequestOptions(BaseModel):
    """Per-call options accepted by ``HttpService.get/post/put/delete``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    timeout_ms: int | None = Field(default=None, ge=1)
    max_retries: int | None = Field(default=None, ge=0)
    silent: bool = False
    disable_error_report: bool = False
    auth: str | list[str] | None = None
    keep_params_intact: bool = False
    headers: dict[str, HeaderValue] = Field(default_factory=dict)
    stream: bool = False


class RequestSpec(BaseModel):
    """Immutable description of one logical request.

    The ``config`` handler may return a modified copy; the spec handed to
    the pipeline is never mutated.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    route: str = Field(min_length=1)
    method: HttpMethod
    headers: dict[str, HeaderValue] = Field(default_factory=dict)
    timeout_ms: int | None = Field(default=None, ge=1)
    max_retries: int | None = Field(default=None, ge=0)
    silent: bool = False
    keep_params_intact: bool = False
    disable_error_report: bool = False
    auth: str | list[str] | None = Field(
        default=None, description="Permission identifiers, passed through to handlers"
    )
    stream: bool = Field(
        default=False, description="Consume the response body as a stream"
    )

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        """Accept lower-case method names."""
        if isinstance(v, str):
            return v.upper()
        return v

    @classmethod
    def build(
        cls,
        route: str,
        method: HttpMethod | str,
        options: RequestOptions | None = None,
    ) -> "RequestSpec":
        """Build a spec from a route, a method and call options.

        Args:
            route: Logical route or absolute URL.
            method: HTTP method.
            options: Per-call options.

        Returns:
            New request spec.
        """
        options = options or RequestOptions()
        return cls(route=route, method=method, **options.model_dump())


def header_value(value: HeaderValue) -> str:
    """Render a header value the way it goes on the wire."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
