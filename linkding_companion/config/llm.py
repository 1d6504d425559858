from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ._validators import _bounded_float, _optional_api_key, validate_model_name


class OpenAIConfig(BaseModel):
    """Chat-completion settings (any OpenAI-compatible endpoint, e.g. OpenRouter)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    model: str = Field(default="gpt-4.1-nano", validation_alias="OPENAI_MODEL")
    base_url: str = Field(default="https://api.openai.com/v1", validation_alias="OPENAI_BASE_URL")
    timeout_sec: float = Field(default=60.0, validation_alias="OPENAI_TIMEOUT_SEC")
    temperature: float = Field(default=0.2, validation_alias="OPENAI_TEMPERATURE")

    @field_validator("api_key", mode="before")
    @classmethod
    def _validate_api_key(cls, value: Any) -> str:
        return _optional_api_key(value, name="OpenAI")

    @field_validator("model", mode="before")
    @classmethod
    def _validate_model(cls, value: Any) -> str:
        if value in (None, ""):
            return "gpt-4.1-nano"
        return validate_model_name(str(value))

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, value: Any) -> str:
        url = str(value or "https://api.openai.com/v1").strip()
        if not url.startswith(("http://", "https://")):
            msg = "OpenAI base URL must start with http:// or https://"
            raise ValueError(msg)
        return url.rstrip("/")

    @field_validator("timeout_sec", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> float:
        return _bounded_float(value, default=60.0, name="OpenAI timeout", minimum=1.0, maximum=600.0)

    @field_validator("temperature", mode="before")
    @classmethod
    def _validate_temperature(cls, value: Any) -> float:
        return _bounded_float(value, default=0.2, name="Temperature", minimum=0.0, maximum=2.0)
