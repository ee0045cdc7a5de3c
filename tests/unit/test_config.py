"""
TabTagger v1 - Configuration Tests
"""

import os

import pytest

import config
from config import Config, LLMSettings, ProcessingSettings, get_config, load_env, reset_config

LLM_ENV_VARS = (
    "LLM_PROVIDER",
    "LLM_API_KEY",
    "LLM_API_ENDPOINT",
    "LLM_MODEL_NAME",
    "LLM_TIMEOUT",
    "MAX_RETRIES",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate settings from the developer's environment and .env file."""
    for name in LLM_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


class TestLLMSettings:
    """Tests for provider settings."""

    def test_defaults(self):
        settings = LLMSettings()
        assert settings.provider == "openai"
        assert settings.api_key is None
        assert settings.timeout == 60.0
        assert settings.max_retries == 1

    def test_env_aliases(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "ollama")
        monkeypatch.setenv("LLM_API_ENDPOINT", "http://gpu-box:11434")
        monkeypatch.setenv("LLM_MODEL_NAME", "llama3.1")
        monkeypatch.setenv("LLM_TIMEOUT", "15")
        monkeypatch.setenv("MAX_RETRIES", "3")

        settings = LLMSettings()
        assert settings.provider == "ollama"
        assert settings.endpoint == "http://gpu-box:11434"
        assert settings.model_name == "llama3.1"
        assert settings.timeout == 15.0
        assert settings.max_retries == 3

    def test_to_provider_config(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "Claude")
        monkeypatch.setenv("LLM_API_KEY", "c-key")
        provider_config = LLMSettings().to_provider_config()

        assert provider_config.kind == "claude"
        assert provider_config.api_key == "c-key"
        assert provider_config.endpoint is None
        assert provider_config.model is None

    def test_empty_values_become_none(self, monkeypatch):
        monkeypatch.setenv("LLM_API_KEY", "")
        assert LLMSettings().to_provider_config().api_key is None


class TestProcessingSettings:
    """Tests for content extraction settings."""

    def test_defaults(self):
        settings = ProcessingSettings()
        assert settings.max_concurrent == 4
        assert settings.content_max_chars == 3000

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MAX_CONCURRENT_REQUESTS", "8")
        assert ProcessingSettings().max_concurrent == 8


class TestGlobalConfig:
    """Tests for the cached configuration."""

    def test_cached_until_reset(self, monkeypatch):
        first = get_config()
        assert get_config() is first

        monkeypatch.setenv("LLM_PROVIDER", "gemini")
        assert get_config().llm.provider == "openai"
        reset_config()
        assert get_config().llm.provider == "gemini"

    def test_app_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")
        monkeypatch.setenv("APP_DEBUG", "true")
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        cfg = Config()
        assert cfg.app.env == "production"
        assert cfg.app.debug is True
        assert cfg.app.log_level == "INFO"

    def test_load_env_missing_file(self, tmp_path):
        assert load_env(str(tmp_path / "absent.env")) is False

    def test_load_env_resets_cache(self, tmp_path):
        env_file = tmp_path / "tagger.env"
        env_file.write_text("LLM_PROVIDER=custom\n")
        get_config()

        try:
            assert load_env(str(env_file)) is True
            assert config._config is None
            assert get_config().llm.provider == "custom"
        finally:
            os.environ.pop("LLM_PROVIDER", None)
