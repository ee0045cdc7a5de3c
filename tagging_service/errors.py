"""
TabTagger v1 - Provider Error Taxonomy

Errors raised by the transport and provider adapters. The orchestrator is the
only place that turns them into an AnalysisResult.
"""

from typing import Optional

from .models import ErrorKind


class ProviderError(Exception):
    """Base class for failures while talking to an LLM provider."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class ConfigError(ProviderError):
    """Missing or invalid credential/endpoint; raised before any network call."""

    kind = ErrorKind.CONFIG


class UnsupportedProviderError(ConfigError):
    """The configured provider kind has no adapter."""

    def __init__(self, provider: str):
        super().__init__(f"Unsupported LLM provider: {provider!r}")
        self.provider = provider


class NetworkError(ProviderError):
    """Transport failure or non-2xx HTTP status."""

    kind = ErrorKind.NETWORK


class ContentError(ProviderError):
    """The provider answered 2xx but without the expected payload."""

    kind = ErrorKind.CONTENT


class Cancelled(ProviderError):
    """The caller aborted the request or its deadline passed."""

    kind = ErrorKind.CANCELLED
