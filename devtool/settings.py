from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import structlog
from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from devtool.constants import (
    DEFAULT_CONTAINER_NAME,
    DEFAULT_CONTAINER_RUNTIME,
    DEFAULT_DB_PORT,
    DEFAULT_DB_ROOT_PASSWORD,
    DEFAULT_SERVER_PORT,
    LOG_LEVELS,
)
from devtool.exceptions import ConfigurationError
from devtool.tooling import Role, container_name_for

logger = structlog.get_logger(__name__)


def _port_or_default(value: Any, default: int, field_name: str) -> int:
    """
    Return ``value`` as a TCP port, otherwise fall back to ``default``.

    The stack's ``.env`` is hand-edited and shared with Docker Compose, so a
    bad value is reported and replaced instead of aborting the command.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        port = int(str(value).strip())
    except ValueError:
        port = -1
    if 1 <= port <= 65535:
        return port
    logger.warning("config.invalid_port", field=field_name, configured=value, fallback=default)
    return default


def _text_or_default(value: Any, default: str, field_name: str) -> str:
    text = "" if value is None else str(value).strip()
    if text:
        return text
    logger.warning("config.empty_value", field=field_name, fallback=default)
    return default


class DevtoolSettings(BaseSettings):
    """Configuration shared with the Compose stack's ``.env`` file.

    Variables are read without a prefix (``CONTAINER_NAME``, ``DB_PORT``, ...)
    because the same file configures the containers themselves.
    """

    container_name: str = Field(default=DEFAULT_CONTAINER_NAME)
    server_port: int = Field(default=DEFAULT_SERVER_PORT)
    db_port: int = Field(default=DEFAULT_DB_PORT)
    db_root_password: str = Field(default=DEFAULT_DB_ROOT_PASSWORD)

    container_runtime: str = Field(default=DEFAULT_CONTAINER_RUNTIME)
    container_selection: Literal["strict", "first"] = Field(
        default="strict",
        description="How to choose between several running containers sharing a role suffix. "
        "'strict' prefers the configured name and errors on ambiguity; 'first' takes the runtime's first match.",
    )

    log_level: str = Field(default="WARNING")
    log_json_output: bool = Field(default=False)

    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    @field_validator("container_name", mode="before")
    @classmethod
    def _default_container_name(cls, value: Any) -> str:
        return _text_or_default(value, DEFAULT_CONTAINER_NAME, "container_name")

    @field_validator("db_root_password", mode="before")
    @classmethod
    def _default_db_root_password(cls, value: Any) -> str:
        return _text_or_default(value, DEFAULT_DB_ROOT_PASSWORD, "db_root_password")

    @field_validator("server_port", mode="before")
    @classmethod
    def _default_server_port(cls, value: Any) -> int:
        return _port_or_default(value, DEFAULT_SERVER_PORT, "server_port")

    @field_validator("db_port", mode="before")
    @classmethod
    def _default_db_port(cls, value: Any) -> int:
        return _port_or_default(value, DEFAULT_DB_PORT, "db_port")

    @field_validator("container_selection", mode="before")
    @classmethod
    def _normalize_selection(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        level = str(value).strip().upper()
        if level in LOG_LEVELS:
            return level
        logger.warning("config.invalid_log_level", configured=value, fallback="WARNING")
        return "WARNING"

    @property
    def php_container_name(self) -> str:
        return container_name_for(self.container_name, Role.PHP)

    @property
    def node_container_name(self) -> str:
        return container_name_for(self.container_name, Role.NODE)

    def container_for(self, role: Role) -> str:
        return container_name_for(self.container_name, role)


def load_settings(env_file: Path | None = None) -> DevtoolSettings:
    """Build settings from the environment and, when given, a ``.env`` file.

    Raises:
        ConfigurationError: A value cannot be used and has no safe default.
    """
    try:
        if env_file is None:
            return DevtoolSettings()
        return DevtoolSettings(_env_file=env_file)
    except PydanticValidationError as exc:
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ("unknown",))),
                "message": error.get("msg", "Invalid value"),
                "value": str(error.get("input")),
            }
            for error in exc.errors()
        ]
        fields = ", ".join(error["field"] for error in errors)
        raise ConfigurationError(
            f"Invalid configuration value for: {fields}",
            error_code="invalid_configuration",
            details={"env_file": str(env_file) if env_file else None, "errors": errors},
        ) from exc
