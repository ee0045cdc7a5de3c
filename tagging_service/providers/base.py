"""
TabTagger v1 - Provider Base Class

Defines the uniform adapter contract. Each provider subclass only supplies the
endpoint, auth placement, request body and the path to the generated text;
validation, error shaping and decoding are shared here.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from ..errors import ConfigError, ContentError, NetworkError
from ..models import ModelInfo, ProviderConfig, ProviderKind
from ..transport import HttpTransport

logger = logging.getLogger(__name__)

# Longest slice of an unstructured error body quoted back to the caller
MAX_ERROR_BODY_CHARS = 300

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000


@dataclass
class ProviderRequest:
    """Everything needed to send one generation request"""
    url: str
    body: dict
    headers: dict = field(default_factory=dict)
    params: dict = field(default_factory=dict)


def is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def structured_error_message(data: Any) -> Optional[str]:
    """
    Pull a human-readable message out of a decoded error body.

    Understands `{"error": {"message": ...}}` (OpenAI, Gemini, Claude),
    `{"error": "..."}` (Ollama) and a top-level `{"message": ...}`.
    """
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    if isinstance(error, str) and error.strip():
        return error.strip()
    message = data.get("message")
    if isinstance(message, str) and message.strip():
        return message.strip()
    return None


class BaseProvider(ABC):
    """
    Abstract base class for LLM provider adapters.

    Each adapter must implement:
    - build_request(system_prompt, user_prompt, config): URL, auth and body
    - extract_text(data): the generated text from a decoded 2xx body, or None
    """

    kind: ProviderKind
    label: str = "LLM"
    default_model: Optional[str] = None
    default_endpoint: Optional[str] = None
    requires_api_key: bool = False
    requires_endpoint: bool = False

    @abstractmethod
    def build_request(
        self, system_prompt: str, user_prompt: str, config: ProviderConfig
    ) -> ProviderRequest:
        """Build the provider-specific request for one generation call."""

    @abstractmethod
    def extract_text(self, data: Any) -> Optional[str]:
        """Return the generated text from a decoded success body, or None if absent."""

    def validate(self, config: ProviderConfig) -> None:
        """
        Check the fields this provider needs before anything is sent.

        Raises:
            ConfigError: Naming the missing or invalid field
        """
        if self.requires_api_key and not (config.api_key or "").strip():
            raise ConfigError(f"{self.label} API key is required (api_key is missing)")
        if self.requires_endpoint and not (config.endpoint or "").strip():
            raise ConfigError(f"{self.label} endpoint is required (endpoint is missing)")
        if config.endpoint and not is_http_url(config.endpoint.strip()):
            raise ConfigError(
                f"{self.label} endpoint must be an http(s) URL, got {config.endpoint!r}"
            )

    def resolve_model(self, config: ProviderConfig) -> Optional[str]:
        return config.model or self.default_model

    def resolve_endpoint(self, config: ProviderConfig) -> str:
        endpoint = (config.endpoint or self.default_endpoint or "").strip()
        return endpoint.rstrip("/")

    async def call(
        self,
        system_prompt: str,
        user_prompt: str,
        config: ProviderConfig,
        transport: HttpTransport,
    ) -> str:
        """
        Send one generation request and return the raw model text.

        Raises:
            ConfigError: Required config missing (before any network call)
            NetworkError: Transport failure or non-2xx status
            ContentError: 2xx response without the expected text
            Cancelled: Caller abort or deadline
        """
        self.validate(config)
        request = self.build_request(system_prompt, user_prompt, config)

        response = await transport.post_json(
            request.url, request.body, headers=request.headers, params=request.params
        )
        if not response.is_success:
            raise self.http_error(response)

        data = self.decode_body(response)
        text = self.extract_text(data)
        if text is None:
            raise ContentError(
                f"{self.label} API response missing content", status=response.status_code
            )
        return text

    async def list_models(
        self, config: ProviderConfig, transport: HttpTransport
    ) -> list[ModelInfo]:
        """List models selectable for this provider. Providers without a catalog return []."""
        return []

    def decode_body(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ContentError(
                f"{self.label} API returned a non-JSON response", status=response.status_code
            ) from e

    def http_error(self, response: httpx.Response) -> NetworkError:
        """Shape a non-2xx response into a NetworkError carrying the status code."""
        detail = self.error_detail(response)
        message = f"{self.label} API request failed (status {response.status_code})"
        if detail:
            message += f": {detail}"
        logger.warning(message)
        return NetworkError(message, status=response.status_code)

    def error_detail(self, response: httpx.Response) -> Optional[str]:
        """Structured error message if the body has one, else the start of the raw body."""
        body = response.text or ""
        try:
            data = response.json()
        except ValueError:
            data = None
        message = structured_error_message(data)
        if message:
            return message
        return body[:MAX_ERROR_BODY_CHARS].strip() or None
