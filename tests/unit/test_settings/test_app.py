"""Unit tests for pipeline settings."""

import pytest
from pydantic import ValidationError

from reqflow.settings.app import PipelineSettings, get_settings


class TestPipelineSettings:
    """Tests for PipelineSettings."""

    @pytest.fixture(autouse=True)
    def _isolate(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        """Run without a stray .env file."""
        monkeypatch.chdir(tmp_path)

    def test_defaults(self) -> None:
        """Defaults match the documented pipeline defaults."""
        settings = PipelineSettings()

        assert settings.default_timeout_ms == 10000
        assert settings.default_max_retries == 0
        assert settings.backoff_unit_ms == 1000
        assert settings.excluded_status_codes == [401, 404]
        assert settings.base_url is None
        assert settings.log_json is True

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """REQFLOW_-prefixed variables override defaults."""
        monkeypatch.setenv("REQFLOW_DEFAULT_TIMEOUT_MS", "2500")
        monkeypatch.setenv("REQFLOW_DEFAULT_MAX_RETRIES", "3")
        monkeypatch.setenv("REQFLOW_EXCLUDED_STATUS_CODES", "[401, 403, 404]")
        monkeypatch.setenv("REQFLOW_BASE_URL", "https://svc.example")

        settings = get_settings()

        assert settings.default_timeout_ms == 2500
        assert settings.default_max_retries == 3
        assert settings.excluded_status_codes == [401, 403, 404]
        assert settings.base_url == "https://svc.example"

    def test_reads_dotenv(self, tmp_path) -> None:
        """Values may come from a .env file in the working directory."""
        (tmp_path / ".env").write_text("REQFLOW_BACKOFF_UNIT_MS=250\n")

        assert PipelineSettings().backoff_unit_ms == 250

    def test_rejects_zero_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A zero overall timeout is invalid."""
        monkeypatch.setenv("REQFLOW_DEFAULT_TIMEOUT_MS", "0")

        with pytest.raises(ValidationError):
            PipelineSettings()
