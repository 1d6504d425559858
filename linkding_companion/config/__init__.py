from __future__ import annotations

from ._validators import validate_model_name
from .async_jobs import DispatcherConfig, PipelineConfig
from .integrations import ContentConfig, LinkdingConfig, SearchConfig
from .llm import OpenAIConfig
from .settings import AppConfig, RuntimeConfig, Settings, load_config, load_linkding_config

__all__ = [
    "AppConfig",
    "ContentConfig",
    "DispatcherConfig",
    "LinkdingConfig",
    "OpenAIConfig",
    "PipelineConfig",
    "RuntimeConfig",
    "SearchConfig",
    "Settings",
    "load_config",
    "load_linkding_config",
    "validate_model_name",
]
