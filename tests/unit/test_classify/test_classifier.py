"""Unit tests for response classification."""

import pytest

from reqflow.classify.classifier import (
    classify,
    find_logical_code,
    is_success_code,
    resolve_status,
)
from reqflow.classify.models import ClassifyContext
from reqflow.transport.models import Attempt, FailureKind, TransportFailure
from tests.helpers.transports import failed_attempt, ok_attempt


class TestResolveStatus:
    """Tests for effective status resolution."""

    def test_prefers_attempt_status(self) -> None:
        """The top-level status wins."""
        assert resolve_status(ok_attempt(status_code=201)) == 201

    def test_falls_back_to_nested_failure_status(self) -> None:
        """Failures carrying the real status one level down are read."""
        attempt = Attempt(
            error=TransportFailure(
                kind=FailureKind.HTTP_STATUS, message="gone", status_code=410
            )
        )
        assert resolve_status(attempt) == 410

    def test_unknown_status(self) -> None:
        """No status anywhere resolves to -1."""
        assert resolve_status(failed_attempt(None)) == -1


class TestClassifySuccessStatuses:
    """Classification of 2xx attempts."""

    @pytest.mark.unit
    def test_success_code_yields_success_with_full_body(self) -> None:
        """errcode 0 is a success; the whole body is the payload."""
        body = {"errcode": 0, "data": {"id": 7}}

        outcome = classify(ok_attempt(body))

        assert outcome.success is True
        assert outcome.payload == body
        assert outcome.logical_code == 0
        assert outcome.status_code == 200

    @pytest.mark.unit
    def test_failure_code_yields_raw_body(self) -> None:
        """A non-success code fails with the body, not the attempt, as payload."""
        outcome = classify(ok_attempt({"errcode": 7}))

        assert outcome.success is False
        assert outcome.payload == {"errcode": 7}
        assert outcome.logical_code == 7

    @pytest.mark.unit
    @pytest.mark.parametrize("status", [200, 201, 204])
    @pytest.mark.parametrize("body", [{"data": [1, 2]}, "plain text", None, [1, 2]])
    def test_no_code_field_is_success(self, status: int, body: object) -> None:
        """Bodies without a recognized code field are successes."""
        outcome = classify(ok_attempt(body, status_code=status))

        assert outcome.success is True
        assert outcome.logical_code is None
        assert outcome.payload == body

    @pytest.mark.unit
    def test_first_matching_key_wins(self) -> None:
        """Keys are scanned in order and scanning stops at the first hit."""
        body = {"code": 0, "error": 99}

        outcome = classify(ok_attempt(body))

        assert outcome.logical_code == 99
        assert outcome.success is False

    @pytest.mark.unit
    def test_none_value_is_skipped(self) -> None:
        """A key holding None does not count as present."""
        outcome = classify(ok_attempt({"errcode": None, "code": 200}))

        assert outcome.logical_code == 200
        assert outcome.success is True

    @pytest.mark.unit
    def test_custom_context(self) -> None:
        """Code keys and success codes come from the context."""
        context = ClassifyContext(code_keys=("status",), success_codes=("OK",))

        assert classify(ok_attempt({"status": "OK"}), context).success is True
        assert classify(ok_attempt({"status": "DENIED"}), context).success is False
        assert classify(ok_attempt({"errcode": 5}), context).success is True

    @pytest.mark.unit
    def test_202_is_not_a_success_status(self) -> None:
        """Only 200, 201 and 204 are inspected for codes."""
        attempt = ok_attempt({"errcode": 0}, status_code=202)

        outcome = classify(attempt)

        assert outcome.success is False
        assert outcome.payload is attempt


class TestClassifyFailureStatuses:
    """Classification of non-2xx attempts."""

    @pytest.mark.unit
    @pytest.mark.parametrize("status", [400, 401, 404, 500, 503])
    def test_failure_carries_whole_attempt(self, status: int) -> None:
        """The payload is the attempt so callers can read the status."""
        attempt = failed_attempt(status, body={"errcode": 0})

        outcome = classify(attempt)

        assert outcome.success is False
        assert outcome.payload is attempt
        assert outcome.status_code == status

    @pytest.mark.unit
    def test_unknown_status_is_failure(self) -> None:
        """Connection failures are failures with status -1."""
        outcome = classify(failed_attempt(None))

        assert outcome.success is False
        assert outcome.status_code == -1


class TestHelpers:
    """Tests for the code helpers."""

    def test_find_logical_code_ignores_non_mappings(self) -> None:
        """Only mapping bodies are scanned."""
        assert find_logical_code(["errcode"], ("errcode",)) is None

    def test_booleans_only_match_booleans(self) -> None:
        """False is not read as 0 nor True as 1."""
        assert is_success_code(False, (0, 200)) is False
        assert is_success_code(True, (1,)) is False
        assert is_success_code(False, (False,)) is True
        assert is_success_code(0, (0, 200)) is True
