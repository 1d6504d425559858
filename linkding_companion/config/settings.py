from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from ._validators import _bounded_float
from .async_jobs import DispatcherConfig, PipelineConfig
from .integrations import ContentConfig, LinkdingConfig, SearchConfig
from .llm import OpenAIConfig

logger = logging.getLogger(__name__)


class RuntimeConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    db_path: str = Field(default="data/companion.db", validation_alias="DB_PATH")
    db_operation_timeout_sec: float = Field(
        default=30.0, validation_alias="DB_OPERATION_TIMEOUT_SEC"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="json", validation_alias="LOG_FORMAT")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> str:
        log_level = str(value or "INFO").upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if log_level not in valid_levels:
            msg = f"Invalid log level: {value}. Must be one of {valid_levels}"
            raise ValueError(msg)
        return log_level

    @field_validator("log_format", mode="before")
    @classmethod
    def _validate_log_format(cls, value: Any) -> str:
        log_format = str(value or "json").lower().strip()
        if log_format not in {"json", "loguru"}:
            msg = f"Invalid log format: {log_format}. Must be 'json' or 'loguru'"
            raise ValueError(msg)
        return log_format

    @field_validator("db_operation_timeout_sec", mode="before")
    @classmethod
    def _validate_db_timeout(cls, value: Any) -> float:
        return _bounded_float(
            value, default=30.0, name="DB operation timeout", minimum=1.0, maximum=600.0
        )

    @field_validator("db_path", mode="before")
    @classmethod
    def _validate_db_path(cls, value: Any) -> str:
        path = str(value or "data/companion.db").strip()
        if "\x00" in path:
            msg = "DB path contains invalid characters"
            raise ValueError(msg)
        return path


@dataclass(frozen=True)
class AppConfig:
    linkding: LinkdingConfig
    openai: OpenAIConfig
    search: SearchConfig
    content: ContentConfig
    pipeline: PipelineConfig
    dispatcher: DispatcherConfig
    runtime: RuntimeConfig


class Settings(BaseSettings):
    """Application settings loaded from the environment and an optional ``.env`` file.

    Each nested section is populated from flat environment variables by
    matching the ``validation_alias`` of its fields.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    linkding: LinkdingConfig = Field(default_factory=LinkdingConfig)
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    content: ContentConfig = Field(default_factory=ContentConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    dispatcher: DispatcherConfig = Field(default_factory=DispatcherConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)

    @model_validator(mode="before")
    @classmethod
    def _build_nested_from_env(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Build nested sections from flat environment variables.

        Constructor arguments take precedence over ``os.environ``.
        """
        if not isinstance(data, dict):
            return data

        result = dict(data)
        merged_source = {**os.environ, **data}

        for field_name, field_info in cls.model_fields.items():
            annotation = field_info.annotation
            if not isinstance(annotation, type) or not issubclass(annotation, BaseModel):
                continue

            nested_data: dict[str, Any] = {}
            for nested_field_name, nested_field in annotation.model_fields.items():
                env_value = cls._resolve_env_value(merged_source, nested_field)
                if env_value is not None:
                    nested_data[nested_field_name] = env_value

            if nested_data:
                if isinstance(result.get(field_name), dict):
                    result[field_name] = {**nested_data, **result[field_name]}
                else:
                    result[field_name] = nested_data

        return result

    @staticmethod
    def _resolve_env_value(data: dict[str, Any], field: Any) -> Any | None:
        aliases: list[str] = []
        alias = field.validation_alias
        if isinstance(alias, AliasChoices):
            aliases.extend(choice for choice in alias.choices if isinstance(choice, str))
        elif isinstance(alias, str):
            aliases.append(alias)
        if field.alias:
            aliases.append(field.alias)

        for name in aliases:
            if name in data:
                return data[name]
        return None

    def as_app_config(self) -> AppConfig:
        return AppConfig(
            linkding=self.linkding,
            openai=self.openai,
            search=self.search,
            content=self.content,
            pipeline=self.pipeline,
            dispatcher=self.dispatcher,
            runtime=self.runtime,
        )


def load_config(**overrides: Any) -> AppConfig:
    """Load application configuration from environment variables and ``.env``.

    Missing linkding credentials do not fail here; the bookmark client raises
    ``UnconfiguredError`` when it is constructed without them.

    Raises:
        RuntimeError: If a configured value fails validation.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        msg = f"Configuration validation failed: {exc}"
        raise RuntimeError(msg) from exc

    if not settings.linkding.configured:
        logger.warning(
            "linkding_not_configured",
            extra={
                "has_host": bool(settings.linkding.host),
                "has_api_key": bool(settings.linkding.api_key),
            },
        )
    if not settings.search.enabled:
        logger.info("search_disabled_no_api_key")

    return settings.as_app_config()


def load_linkding_config() -> LinkdingConfig:
    """Resolve only the linkding section, straight from the environment."""
    try:
        return LinkdingConfig.model_validate(dict(os.environ))
    except ValidationError as exc:
        msg = f"Linkding configuration validation failed: {exc}"
        raise RuntimeError(msg) from exc
