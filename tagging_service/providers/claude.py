"""
TabTagger v1 - Anthropic Claude Provider

Messages API adapter authenticated with the `x-api-key` header.
"""

import logging
from typing import Any, Optional

from ..errors import ConfigError, NetworkError
from ..models import ModelInfo, ProviderConfig, ProviderKind
from ..transport import HttpTransport
from .base import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, BaseProvider, ProviderRequest

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"

# There is no public listing endpoint, so the catalog is fixed
KNOWN_MODELS = [
    ModelInfo(id="claude-3-5-sonnet-20241022", name="Claude 3.5 Sonnet (Latest)"),
    ModelInfo(id="claude-3-5-sonnet-20240620", name="Claude 3.5 Sonnet (June 2024)"),
    ModelInfo(id="claude-3-5-haiku-20241022", name="Claude 3.5 Haiku (Latest)"),
    ModelInfo(id="claude-3-opus-20240229", name="Claude 3 Opus"),
    ModelInfo(id="claude-3-sonnet-20240229", name="Claude 3 Sonnet"),
    ModelInfo(id="claude-3-haiku-20240307", name="Claude 3 Haiku"),
]


class ClaudeProvider(BaseProvider):
    """Adapter for https://api.anthropic.com/v1/messages"""

    kind = ProviderKind.CLAUDE
    label = "Claude"
    default_model = "claude-3-5-sonnet-20241022"
    requires_api_key = True

    MESSAGES_URL = "https://api.anthropic.com/v1/messages"
    PROBE_MODEL = "claude-3-5-haiku-20241022"

    def _auth_headers(self, config: ProviderConfig) -> dict:
        return {"x-api-key": config.api_key, "anthropic-version": ANTHROPIC_VERSION}

    def build_request(
        self, system_prompt: str, user_prompt: str, config: ProviderConfig
    ) -> ProviderRequest:
        return ProviderRequest(
            url=self.MESSAGES_URL,
            headers=self._auth_headers(config),
            body={
                "model": self.resolve_model(config),
                "max_tokens": DEFAULT_MAX_TOKENS,
                "temperature": DEFAULT_TEMPERATURE,
                "system": system_prompt,
                "messages": [{"role": "user", "content": user_prompt}],
            },
        )

    def extract_text(self, data: Any) -> Optional[str]:
        # First content block of type "text"
        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list):
            return None
        for block in blocks:
            if isinstance(block, dict) and block.get("type") == "text":
                text = (block.get("text") or "").strip()
                return text or None
        return None

    async def list_models(
        self, config: ProviderConfig, transport: HttpTransport
    ) -> list[ModelInfo]:
        """
        Return the known Claude models after checking the key with a tiny request.

        Only an explicit 401/403 rejects the key; any other outcome, including a
        network failure, still returns the catalog.
        """
        self.validate(config)
        try:
            response = await transport.post_json(
                self.MESSAGES_URL,
                {
                    "model": self.PROBE_MODEL,
                    "max_tokens": 10,
                    "messages": [{"role": "user", "content": "Hi"}],
                },
                headers=self._auth_headers(config),
            )
        except NetworkError as e:
            logger.warning(f"Claude key check skipped: {e}")
            return list(KNOWN_MODELS)

        if response.status_code in (401, 403):
            raise ConfigError("Invalid API key", status=response.status_code)
        return list(KNOWN_MODELS)
