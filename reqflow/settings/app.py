"""Pipeline settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """Centralized environment configuration for the request pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="REQFLOW_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_timeout_ms: int = Field(default=10000, ge=1)
    default_max_retries: int = Field(default=0, ge=0)
    backoff_unit_ms: int = Field(default=1000, ge=0)
    excluded_status_codes: list[int] = Field(default_factory=lambda: [401, 404])
    base_url: str | None = None
    log_json: bool = True


def get_settings() -> PipelineSettings:
    """Get a settings instance."""
    return PipelineSettings()
