"""
TabTagger v1 - Custom Endpoint Provider

Adapter for a caller-defined HTTP endpoint taking `{"prompt", "model"?}`.
"""

import json
from typing import Any, Optional

from ..models import ProviderConfig, ProviderKind
from .base import BaseProvider, ProviderRequest

# Response fields probed, in order, for the generated text
TEXT_FIELDS = ("response", "text", "content", "output")


class CustomProvider(BaseProvider):
    """Adapter for any JSON endpoint, with an optional Bearer token"""

    kind = ProviderKind.CUSTOM
    label = "Custom"
    requires_endpoint = True

    def build_request(
        self, system_prompt: str, user_prompt: str, config: ProviderConfig
    ) -> ProviderRequest:
        headers = {}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"

        body = {"prompt": user_prompt}
        model = self.resolve_model(config)
        if model:
            body["model"] = model

        return ProviderRequest(url=config.endpoint.strip(), headers=headers, body=body)

    def extract_text(self, data: Any) -> Optional[str]:
        if isinstance(data, dict):
            for name in TEXT_FIELDS:
                value = data.get(name)
                if value:
                    return value if isinstance(value, str) else json.dumps(value)
        # Unknown shape: hand the whole body to the normalizer
        return json.dumps(data)
