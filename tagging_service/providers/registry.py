"""
TabTagger v1 - Provider Registry

Maps a ProviderConfig.kind to its adapter. This is the only place that knows
which adapter serves which kind.
"""

from typing import Optional

from ..errors import UnsupportedProviderError
from ..models import ProviderKind
from .base import BaseProvider
from .claude import ClaudeProvider
from .custom import CustomProvider
from .gemini import GeminiProvider
from .ollama import OllamaProvider
from .openai import OpenAIProvider


class ProviderRegistry:
    """Registry of adapter instances keyed by provider kind."""

    def __init__(self):
        self._providers: dict[ProviderKind, BaseProvider] = {}

    def register(self, provider: BaseProvider) -> None:
        self._providers[provider.kind] = provider

    def get_provider(self, kind: str) -> BaseProvider:
        """
        Look up the adapter for `kind`.

        Raises:
            UnsupportedProviderError: If no adapter is registered for the kind
        """
        try:
            provider_kind = ProviderKind(kind)
        except ValueError:
            raise UnsupportedProviderError(kind) from None

        provider = self._providers.get(provider_kind)
        if provider is None:
            raise UnsupportedProviderError(kind)
        return provider

    def list_providers(self) -> list[str]:
        """Get the registered provider kinds"""
        return [kind.value for kind in self._providers]


def get_default_registry() -> ProviderRegistry:
    """Create a registry holding every built-in adapter."""
    registry = ProviderRegistry()
    registry.register(OpenAIProvider())
    registry.register(GeminiProvider())
    registry.register(ClaudeProvider())
    registry.register(OllamaProvider())
    registry.register(CustomProvider())
    return registry


_default_registry: Optional[ProviderRegistry] = None


def get_registry() -> ProviderRegistry:
    """Get the global default registry, creating it if necessary."""
    global _default_registry
    if _default_registry is None:
        _default_registry = get_default_registry()
    return _default_registry

