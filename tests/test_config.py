"""Tests for environment-driven client settings."""

import pytest

from vismatch_client.config import Settings, get_settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("VISMATCH_API_URL", raising=False)
    settings = Settings(_env_file=None)
    assert settings.api_url == "http://localhost:3000"
    assert settings.request_timeout == 30.0
    assert settings.cleanup_delay == 2.0


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VISMATCH_API_URL", "http://vismatch:8080")
    monkeypatch.setenv("VISMATCH_REQUEST_TIMEOUT", "5")
    settings = Settings(_env_file=None)
    assert settings.api_url == "http://vismatch:8080"
    assert settings.request_timeout == 5.0


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()
