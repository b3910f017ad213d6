"""Tests for environment-driven settings."""

from pathlib import Path

from aips.llm import DEFAULT_BASE_URL, DEFAULT_MODEL
from backend.config import DEFAULT_DATA_DIR, load_settings

ENV_VARS = (
    "DATA_DIR",
    "COMPLETION_API_URL",
    "COMPLETION_API_KEY",
    "COMPLETION_MODEL",
    "COMPLETION_TIMEOUT",
    "COMPLETION_MAX_RETRIES",
)


def test_defaults(monkeypatch):
    """Unset variables fall back to the built-in defaults."""
    monkeypatch.setattr("backend.config.load_dotenv", lambda *a, **kw: False)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.data_dir == DEFAULT_DATA_DIR
    assert settings.completion_url == DEFAULT_BASE_URL
    assert settings.completion_model == DEFAULT_MODEL
    assert settings.completion_api_key == ""
    assert settings.completion_timeout == 120.0
    assert settings.completion_max_retries == 0


def test_from_environment(monkeypatch):
    monkeypatch.setattr("backend.config.load_dotenv", lambda *a, **kw: False)
    monkeypatch.setenv("DATA_DIR", "/tmp/aips")
    monkeypatch.setenv("COMPLETION_API_URL", "http://localhost:8080/v1")
    monkeypatch.setenv("COMPLETION_API_KEY", "sk-test")
    monkeypatch.setenv("COMPLETION_MODEL", "tiny")
    monkeypatch.setenv("COMPLETION_TIMEOUT", "5")
    monkeypatch.setenv("COMPLETION_MAX_RETRIES", "2")
    settings = load_settings()
    assert settings.data_dir == Path("/tmp/aips")
    assert settings.completion_url == "http://localhost:8080/v1"
    assert settings.completion_api_key == "sk-test"
    assert settings.completion_model == "tiny"
    assert settings.completion_timeout == 5.0
    assert settings.completion_max_retries == 2
