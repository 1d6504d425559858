"""Configuration loading tests."""

from __future__ import annotations

import pytest

from linkding_companion.config import load_config, load_linkding_config


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)


def test_defaults():
    cfg = load_config()

    assert cfg.linkding.configured is False
    assert cfg.linkding.page_size == 100
    assert cfg.search.enabled is False
    assert cfg.content.extractor == "trafilatura"
    assert cfg.content.summary_max_chars == 4000
    assert cfg.pipeline.sync_interval_minutes == 15
    assert cfg.pipeline.search_resubmits_summarize is False
    assert cfg.dispatcher.max_concurrency == 4
    assert cfg.runtime.log_level == "INFO"


def test_flat_environment_variables(monkeypatch):
    monkeypatch.setenv("LINKDING_HOST", "https://links.example.org/")
    monkeypatch.setenv("LINKDING_API_KEY", "abc123")
    monkeypatch.setenv("BRAVE_API_KEY", "brave")
    monkeypatch.setenv("DISPATCHER_MAX_CONCURRENCY", "8")
    monkeypatch.setenv("SYNC_INTERVAL_MINUTES", "5")
    monkeypatch.setenv("CONTENT_EXTRACTOR", "readability-cli")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    cfg = load_config()

    assert cfg.linkding.host == "https://links.example.org"
    assert cfg.linkding.configured is True
    assert cfg.search.enabled is True
    assert cfg.dispatcher.max_concurrency == 8
    assert cfg.pipeline.sync_interval_minutes == 5
    assert cfg.content.extractor == "readability-cli"
    assert cfg.runtime.log_level == "DEBUG"


def test_host_without_scheme_is_rejected(monkeypatch):
    monkeypatch.setenv("LINKDING_HOST", "links.example.org")

    with pytest.raises(RuntimeError, match="Configuration validation failed"):
        load_config()


def test_out_of_range_interval_is_rejected(monkeypatch):
    monkeypatch.setenv("SYNC_INTERVAL_MINUTES", "0")

    with pytest.raises(RuntimeError):
        load_config()


def test_unknown_extractor_is_rejected(monkeypatch):
    monkeypatch.setenv("CONTENT_EXTRACTOR", "lynx")

    with pytest.raises(RuntimeError):
        load_config()


def test_load_linkding_config_reads_only_its_section(monkeypatch):
    monkeypatch.setenv("LINKDING_HOST", "http://localhost:9090")
    monkeypatch.setenv("LINKDING_API_KEY", "k")
    monkeypatch.setenv("CONTENT_EXTRACTOR", "lynx")

    linkding = load_linkding_config()

    assert linkding.host == "http://localhost:9090"
    assert linkding.api_key == "k"
