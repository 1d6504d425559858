from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from ._validators import _bounded_float, _bounded_int


class DispatcherConfig(BaseModel):
    """Job dispatcher concurrency and retry policy."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    max_concurrency: int = Field(default=4, validation_alias="DISPATCHER_MAX_CONCURRENCY")
    retry_attempts: int = Field(default=3, validation_alias="DISPATCHER_RETRY_ATTEMPTS")
    retry_base_delay_ms: int = Field(default=500, validation_alias="DISPATCHER_RETRY_BASE_DELAY_MS")
    retry_max_delay_ms: int = Field(
        default=30_000, validation_alias="DISPATCHER_RETRY_MAX_DELAY_MS"
    )
    retry_jitter_ratio: float = Field(default=0.2, validation_alias="DISPATCHER_RETRY_JITTER_RATIO")

    @field_validator(
        "max_concurrency",
        "retry_attempts",
        "retry_base_delay_ms",
        "retry_max_delay_ms",
        mode="before",
    )
    @classmethod
    def _validate_positive_int(cls, value: Any, info: ValidationInfo) -> int:
        limits: dict[str, tuple[int, int]] = {
            "max_concurrency": (1, 100),
            "retry_attempts": (1, 10),
            "retry_base_delay_ms": (0, 60_000),
            "retry_max_delay_ms": (0, 600_000),
        }
        minimum, maximum = limits[info.field_name]
        return _bounded_int(
            value,
            default=cls.model_fields[info.field_name].default,
            name=info.field_name.replace("_", " ").capitalize(),
            minimum=minimum,
            maximum=maximum,
        )

    @field_validator("retry_jitter_ratio", mode="before")
    @classmethod
    def _validate_jitter(cls, value: Any) -> float:
        return _bounded_float(
            value, default=0.2, name="Dispatcher retry jitter ratio", minimum=0.0, maximum=1.0
        )

    @model_validator(mode="after")
    def _validate_delays(self) -> DispatcherConfig:
        if self.retry_max_delay_ms < self.retry_base_delay_ms:
            msg = "Dispatcher retry max delay must be >= base delay"
            raise ValueError(msg)
        return self


class PipelineConfig(BaseModel):
    """Sweep cadence and task-graph switches."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sync_enabled: bool = Field(default=True, validation_alias="SYNC_ENABLED")
    sync_interval_minutes: int = Field(default=15, validation_alias="SYNC_INTERVAL_MINUTES")
    search_resubmits_summarize: bool = Field(
        default=False,
        validation_alias="PIPELINE_SEARCH_RESUBMITS_SUMMARIZE",
        description="Also schedule summarize right after a saved search is resolved",
    )

    @field_validator("sync_interval_minutes", mode="before")
    @classmethod
    def _validate_sync_interval(cls, value: Any) -> int:
        return _bounded_int(
            value, default=15, name="Sync interval (minutes)", minimum=1, maximum=10_080
        )
