# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import os

from functools import cached_property
from pathlib import Path
from typing import Type

from pydantic import field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict

from fastresource.dependencies import get_service, has_service, register_service
from fastresource.logger import LogFormat, LogLevel, LogOutput


DEFAULT_REDACTED_KEYS = [
    "password",
    "token",
    "secret",
    "api_key",
    "private_key",
    "remember_token",
]


def _find_project_path() -> str:
    """Find project root by looking for pyproject.toml in current dir and parents."""
    current = Path.cwd()

    for path in [current] + list(current.parents):
        if (path / "pyproject.toml").exists():
            return str(path)

    return str(current)


_PROJECT_PATH = _find_project_path()


class BaseSettings(PydanticBaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_prefix="",
        extra="ignore",
    )

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_output: LogOutput = LogOutput.CONSOLE
    log_format: LogFormat | str = LogFormat.TEXT_LIGHT
    log_file: str = ""

    # Database
    database_url: str = ""
    database_isolation_level: str | None = None

    # Relations
    relation_resolve_limit: int = 15

    # Attachments
    attachment_per_page: int = 25
    attachment_max_per_page: int = 100

    # Audit
    redacted_keys: list[str] = DEFAULT_REDACTED_KEYS

    # I18n
    fallback_locale: str = "en"
    translations_paths: list[str] = []

    @classmethod
    def from_env_file(cls, env_file: str):
        """Create Settings with custom env file path."""
        return cls(_env_file=env_file)

    @property
    def project_path(self) -> str:
        """Get the project root path."""
        return _PROJECT_PATH

    @cached_property
    def log_path(self) -> str:
        if not self.log_file:
            return os.path.join(self.project_path, "logs", "fastresource.log")

        if os.path.isabs(self.log_file):
            return self.log_file

        return os.path.join(self.project_path, self.log_file)

    @cached_property
    def computed_translations_paths(self) -> list[str]:
        paths = []

        # 1. Built-in translations (lowest priority)
        builtin_translations = os.path.join(os.path.dirname(__file__), "translations")

        if os.path.exists(builtin_translations):
            paths.append(builtin_translations)

        # 2. Project translations
        project_translations = os.path.join(self.project_path, "translations")
        if os.path.exists(project_translations):
            paths.append(project_translations)

        # 3. Custom translations paths (highest priority)
        paths.extend(self.translations_paths)

        return paths

    @field_validator("log_format")
    def validate_log_format(cls, v):
        if isinstance(v, str) and v in [item.value for item in LogFormat]:
            return LogFormat(v)
        return v

    @field_validator("attachment_per_page", "attachment_max_per_page", "relation_resolve_limit")
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("must be greater than 0")
        return v


def init_settings(
    env_file: str | None = None,
    settings_class: Type[BaseSettings] = BaseSettings,
) -> BaseSettings:
    """Build the settings once and register them in the service container."""
    if has_service(BaseSettings):
        return get_service(BaseSettings)

    settings = settings_class.from_env_file(env_file or ".env")
    register_service(settings, BaseSettings)

    return settings


def get_settings() -> BaseSettings:
    return init_settings()


__all__ = [
    "BaseSettings",
    "DEFAULT_REDACTED_KEYS",
    "init_settings",
    "get_settings",
]
