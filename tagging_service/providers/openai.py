"""
TabTagger v1 - OpenAI Provider

Chat-completions adapter authenticated with a Bearer token.
"""

from typing import Any, Optional

from ..models import ModelInfo, ProviderConfig, ProviderKind
from ..transport import HttpTransport
from .base import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, BaseProvider, ProviderRequest


class OpenAIProvider(BaseProvider):
    """Adapter for https://api.openai.com/v1/chat/completions"""

    kind = ProviderKind.OPENAI
    label = "OpenAI"
    default_model = "gpt-3.5-turbo"
    requires_api_key = True

    CHAT_URL = "https://api.openai.com/v1/chat/completions"
    MODELS_URL = "https://api.openai.com/v1/models"

    def _auth_headers(self, config: ProviderConfig) -> dict:
        return {"Authorization": f"Bearer {config.api_key}"}

    def build_request(
        self, system_prompt: str, user_prompt: str, config: ProviderConfig
    ) -> ProviderRequest:
        return ProviderRequest(
            url=self.CHAT_URL,
            headers=self._auth_headers(config),
            body={
                "model": self.resolve_model(config),
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "temperature": DEFAULT_TEMPERATURE,
                "max_tokens": DEFAULT_MAX_TOKENS,
            },
        )

    def extract_text(self, data: Any) -> Optional[str]:
        # choices[0].message.content, which must be a string
        if not isinstance(data, dict):
            return None
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        return content if isinstance(content, str) else None

    async def list_models(
        self, config: ProviderConfig, transport: HttpTransport
    ) -> list[ModelInfo]:
        """Chat-capable GPT models, newest families first."""
        self.validate(config)
        response = await transport.get(self.MODELS_URL, headers=self._auth_headers(config))
        if not response.is_success:
            raise self.http_error(response)

        data = self.decode_body(response)
        entries = data.get("data") if isinstance(data, dict) else None
        ids = [
            entry["id"]
            for entry in entries or []
            if isinstance(entry, dict) and isinstance(entry.get("id"), str)
        ]
        chat_ids = [i for i in ids if "gpt" in i and "instruct" not in i]
        chat_ids.sort(key=_model_priority)
        return [ModelInfo(id=i, name=i) for i in chat_ids]


def _model_priority(model_id: str) -> int:
    if "gpt-4-turbo" in model_id:
        return 1
    if "gpt-4" in model_id:
        return 2
    if "gpt-3.5-turbo" in model_id:
        return 3
    return 4
