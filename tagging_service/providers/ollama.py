"""
TabTagger v1 - Ollama Provider

Adapter for a local Ollama server (no authentication). Ollama rejects browser
origins it was not told to trust with a 403, so that status gets remediation
text instead of a bare code.
"""

from typing import Any, Optional

import httpx

from ..errors import ContentError, NetworkError
from ..models import ModelInfo, ProviderConfig, ProviderKind
from ..transport import HttpTransport
from .base import BaseProvider, ProviderRequest

ORIGIN_REMEDIATION = (
    "Recent Ollama versions block requests from browser and extension origins by default. "
    "Allow this origin by starting Ollama with permissive origins enabled, e.g.\n\n"
    '    OLLAMA_ORIGINS="*" ollama serve\n\n'
    'or in PowerShell: $env:OLLAMA_ORIGINS="*"; ollama serve\n\n'
    "Then retry the request."
)


class OllamaProvider(BaseProvider):
    """Adapter for {endpoint}/api/generate with streaming disabled"""

    kind = ProviderKind.OLLAMA
    label = "Ollama"
    default_model = "llama2"
    default_endpoint = "http://localhost:11434"

    def build_request(
        self, system_prompt: str, user_prompt: str, config: ProviderConfig
    ) -> ProviderRequest:
        # /api/generate takes the user prompt only
        return ProviderRequest(
            url=f"{self.resolve_endpoint(config)}/api/generate",
            body={
                "model": self.resolve_model(config),
                "prompt": user_prompt,
                "stream": False,
            },
        )

    def extract_text(self, data: Any) -> Optional[str]:
        text = data.get("response") if isinstance(data, dict) else None
        return text if isinstance(text, str) else None

    def http_error(self, response: httpx.Response) -> NetworkError:
        if response.status_code != 403:
            return super().http_error(response)
        return NetworkError(
            f"Ollama returned 403 (Forbidden). {ORIGIN_REMEDIATION}", status=403
        )

    async def list_models(
        self, config: ProviderConfig, transport: HttpTransport
    ) -> list[ModelInfo]:
        """Locally pulled models with their size on disk."""
        self.validate(config)
        response = await transport.get(f"{self.resolve_endpoint(config)}/api/tags")
        if response.status_code == 403:
            raise self.http_error(response)
        if not response.is_success:
            raise NetworkError(
                f"Failed to connect to Ollama (status {response.status_code}). "
                "Make sure Ollama is running.",
                status=response.status_code,
            )

        data = self.decode_body(response)
        models = data.get("models") if isinstance(data, dict) else None
        if not models:
            raise ContentError("No models found. Pull a model using: ollama pull <model-name>")

        result = []
        for model in models:
            if not isinstance(model, dict) or not model.get("name"):
                continue
            size_gb = (model.get("size") or 0) / 1e9
            result.append(ModelInfo(id=model["name"], name=f"{model['name']} ({size_gb:.1f}GB)"))
        return result
