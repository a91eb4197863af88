"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from elevenlabs_iac.config import DEFAULT_BASE_URL, Settings, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("API_KEY", "BASE_URL", "REQUEST_TIMEOUT", "STATE_FILE", "LOG_LEVEL"):
        monkeypatch.delenv(f"ELEVENLABS_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_reads_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("ELEVENLABS_API_KEY", "sk-env")

        settings = Settings(_env_file=None)

        assert settings.api_key == "sk-env"
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.request_timeout == 10.0

    def test_missing_api_key_is_an_error(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_empty_api_key_is_an_error(self, monkeypatch):
        monkeypatch.setenv("ELEVENLABS_API_KEY", "")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("ELEVENLABS_API_KEY", "k")
        monkeypatch.setenv("ELEVENLABS_BASE_URL", "http://localhost:8001")
        monkeypatch.setenv("ELEVENLABS_REQUEST_TIMEOUT", "2.5")

        settings = Settings(_env_file=None)

        assert settings.base_url == "http://localhost:8001"
        assert settings.request_timeout == 2.5

    def test_get_settings_is_cached(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("ELEVENLABS_API_KEY", "k")
        assert get_settings() is get_settings()
