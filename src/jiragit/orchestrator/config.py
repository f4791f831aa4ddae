"""Configuration for jiragit.

Two layers live here:

- ``JiraGitSettings``: runtime settings loaded from environment variables and a
  local `.env` file (if present).
- ``JiraConfig`` / ``ConfigStore``: the per-user JSON file holding the Jira
  host, account email, API token and project key. The file is written once with
  placeholder values and then edited by hand; the program never mutates it.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from jiragit.orchestrator.errors import ConfigValidationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "jiragit.config.json"

DEFAULT_CONFIG: dict[str, str] = {
    "email": "me@mycompany.com",
    "token": "TODO: generate in https://id.atlassian.com/manage-profile/security/api-tokens",
    "host": "https://mycompany.atlassian.net",
    "projectKey": "Example: for issue like ABC-123 ABC is the project key",
}


def default_config_path() -> Path:
    return Path.home() / CONFIG_FILE_NAME


class JiraGitSettings(BaseSettings):
    """Runtime settings.

    Environment variables:
    - LOG_LEVEL             (optional)
    - JIRAGIT_CONFIG_PATH   (optional)
    - JIRAGIT_HTTP_TIMEOUT  (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `JiraGitSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="WARNING",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    config_path: Path = Field(
        default_factory=default_config_path,
        validation_alias="JIRAGIT_CONFIG_PATH",
        description="Location of the Jira configuration file",
    )

    http_timeout: float = Field(
        default=30.0,
        gt=0,
        validation_alias="JIRAGIT_HTTP_TIMEOUT",
        description="Timeout for each Jira API request, in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level

    @field_validator("config_path")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()


class JiraConfig(BaseModel):
    """Validated contents of the configuration file."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    email: EmailStr
    token: str = Field(min_length=1)
    host: AnyHttpUrl
    project_key: str = Field(alias="projectKey", min_length=1)

    @property
    def base_url(self) -> str:
        """Host URL without a trailing slash."""

        return str(self.host).rstrip("/")

    def issue_url(self, key: str) -> str:
        return f"{self.base_url}/browse/{key}"


def _describe_validation_error(error: ValidationError) -> str:
    parts: list[str] = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "<root>"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


class ConfigStore:
    """JSON-file backed store for the Jira configuration."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> JiraConfig:
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigValidationError(f"Cannot read config file {self._path}: {e}") from e

        try:
            raw: Any = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(
                f"Config file {self._path} is not valid JSON: {e}"
            ) from e

        if not isinstance(raw, dict):
            raise ConfigValidationError(f"Config file {self._path} must contain a JSON object")

        try:
            config = JiraConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigValidationError(
                f"Invalid config file {self._path}: {_describe_validation_error(e)}"
            ) from e

        logger.debug(
            "Config loaded",
            extra={"path": str(self._path), "host": config.base_url, "project": config.project_key},
        )
        return config

    def create_default(self) -> Path:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(DEFAULT_CONFIG, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
        logger.info("Default config written", extra={"path": str(self._path)})
        return self._path
