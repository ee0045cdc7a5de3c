"""
TabTagger v1 - Google Gemini Provider

generateContent adapter; the API key travels as the `key` query parameter.
"""

from typing import Any, Optional
from urllib.parse import quote

from ..models import ModelInfo, ProviderConfig, ProviderKind
from ..transport import HttpTransport
from .base import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, BaseProvider, ProviderRequest


class GeminiProvider(BaseProvider):
    """Adapter for the Generative Language v1beta API"""

    kind = ProviderKind.GEMINI
    label = "Gemini"
    default_model = "gemini-1.5-pro-latest"
    requires_api_key = True

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    def build_request(
        self, system_prompt: str, user_prompt: str, config: ProviderConfig
    ) -> ProviderRequest:
        model = quote(self.resolve_model(config), safe="")
        return ProviderRequest(
            url=f"{self.BASE_URL}/{model}:generateContent",
            params={"key": config.api_key},
            body={
                "contents": [
                    {
                        "role": "user",
                        "parts": [{"text": system_prompt}, {"text": user_prompt}],
                    }
                ],
                "generationConfig": {
                    "temperature": DEFAULT_TEMPERATURE,
                    "maxOutputTokens": DEFAULT_MAX_TOKENS,
                },
            },
        )

    def extract_text(self, data: Any) -> Optional[str]:
        # candidates[0].content.parts[].text joined
        if not isinstance(data, dict):
            return None
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            return None
        content = candidates[0].get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return None
        text = " ".join(
            part.get("text") or "" for part in parts if isinstance(part, dict)
        ).strip()
        return text or None

    async def list_models(
        self, config: ProviderConfig, transport: HttpTransport
    ) -> list[ModelInfo]:
        """Gemini models that support generateContent."""
        self.validate(config)
        response = await transport.get(self.BASE_URL, params={"key": config.api_key})
        if not response.is_success:
            raise self.http_error(response)

        data = self.decode_body(response)
        models = data.get("models") if isinstance(data, dict) else None
        result = []
        for model in models or []:
            if not isinstance(model, dict):
                continue
            name = model.get("name") or ""
            methods = model.get("supportedGenerationMethods") or []
            if "generateContent" in methods and "gemini" in name:
                model_id = name.replace("models/", "", 1)
                result.append(ModelInfo(id=model_id, name=model_id))
        return result
