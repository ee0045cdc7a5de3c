"""
TabTagger v1 - Provider Adapters

One adapter per LLM backend behind the BaseProvider contract.
"""

from .base import BaseProvider, ProviderRequest
from .claude import ClaudeProvider
from .custom import CustomProvider
from .gemini import GeminiProvider
from .ollama import OllamaProvider
from .openai import OpenAIProvider
from .registry import ProviderRegistry, get_default_registry, get_registry

__all__ = [
    "BaseProvider",
    "ProviderRequest",
    "ClaudeProvider",
    "CustomProvider",
    "GeminiProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "ProviderRegistry",
    "get_default_registry",
    "get_registry",
]
