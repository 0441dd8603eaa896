"""Unit tests for the handler registry and request models."""

import dataclasses

import pytest
from pydantic import ValidationError

from reqflow.classify.constants import DEFAULT_CODE_KEYS, DEFAULT_SUCCESS_CODES
from reqflow.pipeline.handlers import HandlerRegistry
from reqflow.pipeline.models import RequestOptions, RequestSpec, header_value
from reqflow.transport.models import HttpMethod


_SPEC = RequestSpec(route="/items", method=HttpMethod.GET)


class TestHandlerRegistry:
    """Tests for HandlerRegistry defaults and overrides."""

    @pytest.mark.unit
    def test_defaults(self) -> None:
        """Defaults leave requests unchanged."""
        registry = HandlerRegistry()

        assert registry.config(_SPEC) is _SPEC
        assert registry.headers(_SPEC) == {}
        assert registry.default_params(_SPEC) == {}
        assert registry.proxy_table() == {}
        assert registry.pre_send_intercept(_SPEC) is False
        assert registry.on_error(None, _SPEC) is None  # type: ignore[arg-type]
        assert tuple(registry.code_keys()) == DEFAULT_CODE_KEYS
        assert tuple(registry.success_codes()) == DEFAULT_SUCCESS_CODES

    @pytest.mark.unit
    def test_default_code_conventions(self) -> None:
        """Default keys and codes are the documented ones."""
        assert DEFAULT_CODE_KEYS == ("errcode", "error", "code", "err_code")
        assert DEFAULT_SUCCESS_CODES == (0, 200)

    @pytest.mark.unit
    def test_override_returns_new_registry(self) -> None:
        """override leaves the original registry untouched."""
        original = HandlerRegistry()

        updated = original.override(pre_send_intercept=lambda spec: True)

        assert updated.pre_send_intercept(_SPEC) is True
        assert original.pre_send_intercept(_SPEC) is False
        assert updated.headers is original.headers

    @pytest.mark.unit
    def test_override_unknown_handler(self) -> None:
        """Unknown handler names are rejected."""
        with pytest.raises(TypeError):
            HandlerRegistry().override(observable=lambda call, spec: call)

    @pytest.mark.unit
    def test_registry_is_immutable(self) -> None:
        """Handlers cannot be swapped in place."""
        registry = HandlerRegistry()

        with pytest.raises(dataclasses.FrozenInstanceError):
            registry.headers = lambda spec: {"X": "1"}  # type: ignore[misc]


class TestRequestSpec:
    """Tests for RequestSpec."""

    def test_build_copies_options(self) -> None:
        """Options become spec fields."""
        options = RequestOptions(timeout_ms=500, max_retries=2, silent=True, auth=["a"])

        spec = RequestSpec.build("/items", "post", options)

        assert spec.method == HttpMethod.POST
        assert spec.timeout_ms == 500
        assert spec.max_retries == 2
        assert spec.silent is True
        assert spec.auth == ["a"]

    def test_build_without_options(self) -> None:
        """Unset options leave settings in charge."""
        spec = RequestSpec.build("/items", HttpMethod.GET)

        assert spec.timeout_ms is None
        assert spec.max_retries is None
        assert spec.keep_params_intact is False

    def test_empty_route_rejected(self) -> None:
        """Routes must not be empty."""
        with pytest.raises(ValidationError):
            RequestSpec(route="", method=HttpMethod.GET)

    @pytest.mark.parametrize("field", ["timeout_ms", "max_retries"])
    def test_negative_budgets_rejected(self, field: str) -> None:
        """Timeouts and retry budgets cannot be negative."""
        with pytest.raises(ValidationError):
            RequestOptions(**{field: -1})

    def test_unknown_option_rejected(self) -> None:
        """Misspelled options fail loudly."""
        with pytest.raises(ValidationError):
            RequestOptions(retries=3)  # type: ignore[call-arg]

    def test_spec_is_frozen(self) -> None:
        """Specs cannot be mutated."""
        with pytest.raises(ValidationError):
            _SPEC.route = "/other"  # type: ignore[misc]


@pytest.mark.parametrize(
    ("value", "expected"),
    [("abc", "abc"), (42, "42"), (1.5, "1.5"), (True, "true"), (False, "false")],
)
def test_header_value(value: object, expected: str) -> None:
    """Header values are rendered as strings."""
    assert header_value(value) == expected  # type: ignore[arg-type]
