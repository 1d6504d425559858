from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ._validators import _bounded_float, _bounded_int, _optional_api_key

logger = logging.getLogger(__name__)


class LinkdingConfig(BaseModel):
    """Connection settings for the linkding instance that owns the bookmarks."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: str = Field(default="", validation_alias="LINKDING_HOST")
    api_key: str = Field(default="", validation_alias="LINKDING_API_KEY")
    timeout_sec: float = Field(default=30.0, validation_alias="LINKDING_TIMEOUT_SEC")
    page_size: int = Field(default=100, validation_alias="LINKDING_PAGE_SIZE")

    @field_validator("host", mode="before")
    @classmethod
    def _validate_host(cls, value: Any) -> str:
        if value in (None, ""):
            return ""
        host = str(value).strip()
        if host and not host.startswith(("http://", "https://")):
            msg = "Linkding host must start with http:// or https://"
            raise ValueError(msg)
        return host.rstrip("/")

    @field_validator("api_key", mode="before")
    @classmethod
    def _validate_api_key(cls, value: Any) -> str:
        return _optional_api_key(value, name="Linkding")

    @field_validator("timeout_sec", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> float:
        return _bounded_float(
            value, default=30.0, name="Linkding timeout", minimum=1.0, maximum=600.0
        )

    @field_validator("page_size", mode="before")
    @classmethod
    def _validate_page_size(cls, value: Any) -> int:
        return _bounded_int(
            value, default=100, name="Linkding page size", minimum=1, maximum=1000
        )

    @property
    def configured(self) -> bool:
        return bool(self.host and self.api_key)


class SearchConfig(BaseModel):
    """Web search used to resolve saved-search bookmarks. No key disables it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    brave_api_key: str = Field(default="", validation_alias="BRAVE_API_KEY")
    timeout_sec: float = Field(default=10.0, validation_alias="SEARCH_TIMEOUT_SEC")

    @field_validator("brave_api_key", mode="before")
    @classmethod
    def _validate_api_key(cls, value: Any) -> str:
        return _optional_api_key(value, name="Brave Search")

    @field_validator("timeout_sec", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> float:
        return _bounded_float(value, default=10.0, name="Search timeout", minimum=1.0, maximum=120.0)

    @property
    def enabled(self) -> bool:
        return bool(self.brave_api_key)


class ContentConfig(BaseModel):
    """Readable-content extraction and summarization limits."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    extractor: str = Field(default="trafilatura", validation_alias="CONTENT_EXTRACTOR")
    timeout_sec: float = Field(default=60.0, validation_alias="CONTENT_TIMEOUT_SEC")
    summary_max_chars: int = Field(default=4000, validation_alias="SUMMARY_MAX_CHARS")

    @field_validator("extractor", mode="before")
    @classmethod
    def _validate_extractor(cls, value: Any) -> str:
        extractor = str(value or "trafilatura").strip().lower()
        valid = {"trafilatura", "readability-cli"}
        if extractor not in valid:
            msg = f"Invalid content extractor: {extractor}. Must be one of {sorted(valid)}"
            raise ValueError(msg)
        return extractor

    @field_validator("timeout_sec", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> float:
        return _bounded_float(
            value, default=60.0, name="Content timeout", minimum=1.0, maximum=600.0
        )

    @field_validator("summary_max_chars", mode="before")
    @classmethod
    def _validate_summary_max_chars(cls, value: Any, info: ValidationInfo) -> int:
        return _bounded_int(
            value,
            default=cls.model_fields[info.field_name].default,
            name="Summary max chars",
            minimum=100,
            maximum=200_000,
        )
