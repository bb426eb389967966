"""Configuration for the command-line workflow runner.

Loaded from environment variables and a local `.env` file (if present).

The CLI acts on behalf of a single user and therefore needs a token of its own:
`GITHUB_MANAGER_TOKEN`. The HTTP server never reads it; there every request brings
the caller's token.
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ManagerSettings(BaseSettings):
    """Settings for the CLI.

    Environment variables:
    - GITHUB_MANAGER_TOKEN
    - GITHUB_BASE_URL                     (optional)
    - GITHUB_WEB_URL                      (optional)
    - GITHUB_MANAGER_MAX_BRANCH_ATTEMPTS  (optional)
    - LOG_LEVEL                           (optional)

    Notes:
        Tests can point at a specific env file via `ManagerSettings(_env_file=path)`.
    """

    github_token: str = Field(
        default="",
        validation_alias="GITHUB_MANAGER_TOKEN",
        description="GitHub token used by the CLI",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    github_web_url: str = Field(
        default="https://github.com",
        validation_alias="GITHUB_WEB_URL",
        description="GitHub web URL used to build branch links",
    )
    max_branch_attempts: int = Field(
        default=5,
        validation_alias="GITHUB_MANAGER_MAX_BRANCH_ATTEMPTS",
        ge=1,
        le=20,
    )
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_github_auth(self) -> ManagerSettings:
        if not self.github_token.strip():
            raise ValueError("GITHUB_MANAGER_TOKEN is required")
        return self
