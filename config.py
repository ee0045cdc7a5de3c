"""
TabTagger v1 - Shared Configuration Module

This module provides centralized configuration management for the service and CLI.
It loads settings from environment variables and provides typed access.
The tagging core never reads these settings directly; callers turn them into an
explicit ProviderConfig.
"""

from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tagging_service.models import ProviderConfig


class LLMSettings(BaseSettings):
    """LLM provider configuration"""
    provider: str = Field(default="openai", alias="LLM_PROVIDER")
    api_key: Optional[str] = Field(default=None, alias="LLM_API_KEY")
    endpoint: Optional[str] = Field(default=None, alias="LLM_API_ENDPOINT")
    model_name: Optional[str] = Field(default=None, alias="LLM_MODEL_NAME")
    timeout: float = Field(default=60.0, alias="LLM_TIMEOUT")
    max_retries: int = Field(default=1, ge=1, alias="MAX_RETRIES")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", protected_namespaces=())

    def to_provider_config(self) -> ProviderConfig:
        """Build the explicit provider config passed into an analysis call"""
        return ProviderConfig(
            kind=self.provider,
            api_key=self.api_key or None,
            endpoint=self.endpoint or None,
            model=self.model_name or None,
        )


class ProcessingSettings(BaseSettings):
    """Content extraction configuration"""
    max_concurrent: int = Field(default=4, ge=1, alias="MAX_CONCURRENT_REQUESTS")
    fetch_timeout: float = Field(default=30.0, alias="FETCH_TIMEOUT")
    content_max_chars: int = Field(default=3000, ge=1, alias="CONTENT_MAX_CHARS")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class AppSettings(BaseSettings):
    """General application settings"""
    env: str = Field(default="development", alias="APP_ENV")
    debug: bool = Field(default=False, alias="APP_DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        alias="LOG_FORMAT",
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class Config:
    """Main configuration class that combines all settings"""

    def __init__(self):
        self.llm = LLMSettings()
        self.processing = ProcessingSettings()
        self.app = AppSettings()


_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance, creating it on first use"""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next access re-reads the environment"""
    global _config
    _config = None


def load_env(env_file: str = ".env") -> bool:
    """
    Load environment variables from file.

    Returns:
        True if the file existed and was loaded
    """
    from dotenv import load_dotenv
    env_path = Path(env_file)
    if not env_path.exists():
        return False
    load_dotenv(env_path)
    reset_config()
    return True
