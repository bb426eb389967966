"""Configuration for the REST server.

The server holds no GitHub credential of its own: every request must carry the caller's
token in the `Authorization` header. Settings therefore only cover endpoints, CORS and
process concerns.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """Settings for the REST API."""

    github_base_url: str = Field(
        default="https://api.github.com", validation_alias="GITHUB_BASE_URL"
    )
    github_web_url: str = Field(default="https://github.com", validation_alias="GITHUB_WEB_URL")

    max_branch_attempts: int = Field(
        default=5,
        validation_alias="GITHUB_MANAGER_MAX_BRANCH_ATTEMPTS",
        description="How many branch names to probe before giving up on a title.",
        ge=1,
        le=20,
    )

    # The frontend origin. CLIENT_URL is honoured for compatibility with older deployments.
    cors_origins: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("GITHUB_MANAGER_CORS_ORIGINS", "CLIENT_URL"),
        description="Comma-separated list of allowed CORS origins.",
    )

    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=5000, validation_alias="PORT", ge=1, le=65535)
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
