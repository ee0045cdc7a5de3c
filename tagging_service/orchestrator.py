"""
TabTagger v1 - Analysis Orchestrator

Sequences prompt building, the provider call and response normalization, and
converts every failure into a structured AnalysisResult.
"""

import asyncio
import logging
from typing import Optional, Sequence

import httpx

from .errors import ProviderError
from .models import (
    AnalysisRequest,
    AnalysisResult,
    ErrorKind,
    ModelInfo,
    ProviderConfig,
    TabDescriptor,
    TagSuggestion,
)
from .normalizer import MAX_TAG_LENGTH, normalize
from .prompt import SYSTEM_PROMPT, build_prompt
from .providers.registry import ProviderRegistry, get_registry
from .transport import DEFAULT_TIMEOUT, HttpTransport

logger = logging.getLogger(__name__)

MAX_TAGS_PER_TAB = 3

# Tabs used to check that a provider answers end to end
SAMPLE_TABS = [
    TabDescriptor(id=1, title="GitHub - Code Repository", url="https://github.com"),
    TabDescriptor(id=2, title="Stack Overflow - Programming Q&A", url="https://stackoverflow.com"),
]


def bound_tags(tags: Sequence[str]) -> list[str]:
    """Trimmed, non-empty tags shorter than MAX_TAG_LENGTH; first MAX_TAGS_PER_TAB kept."""
    cleaned = [tag.strip() for tag in tags if isinstance(tag, str)]
    return [tag for tag in cleaned if 0 < len(tag) < MAX_TAG_LENGTH][:MAX_TAGS_PER_TAB]


def bound_suggestions(suggestions: Sequence[TagSuggestion]) -> list[TagSuggestion]:
    """Apply bound_tags to every suggestion, dropping those left without tags."""
    bounded = []
    for suggestion in suggestions:
        tags = bound_tags(suggestion.tags)
        if tags:
            bounded.append(TagSuggestion(tab_id=suggestion.tab_id, tags=tags))
    return bounded


async def analyze(
    request: AnalysisRequest,
    *,
    client: Optional[httpx.AsyncClient] = None,
    registry: Optional[ProviderRegistry] = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_attempts: int = 1,
    cancel_event: Optional[asyncio.Event] = None,
    deadline: Optional[float] = None,
) -> AnalysisResult:
    """
    Ask the configured provider for tags and normalize its answer.

    Args:
        request: Tabs in prompt order plus the provider config
        client: Optional httpx client to borrow for the provider call
        registry: Adapter lookup; defaults to the built-in registry
        timeout: Per-request timeout in seconds
        max_attempts: Attempts on transport errors
        cancel_event: Setting it abandons the in-flight request
        deadline: Seconds allowed for the provider call, retries included

    Returns:
        AnalysisResult; failures are reported in it, never raised
    """
    tabs = list(request.tabs)
    config = request.config

    try:
        provider = (registry or get_registry()).get_provider(config.kind)
        if not tabs:
            return AnalysisResult.success([])

        prompt = build_prompt(tabs)
        logger.info(f"Analyzing {len(tabs)} tabs with {provider.label}")

        async with HttpTransport(
            client,
            timeout=timeout,
            max_attempts=max_attempts,
            cancel_event=cancel_event,
            deadline=deadline,
        ) as transport:
            raw = await provider.call(SYSTEM_PROMPT, prompt, config, transport)

        outcome = normalize(raw, tabs)
        suggestions = bound_suggestions(outcome.suggestions)
        logger.info(
            f"{provider.label} produced {len(suggestions)} suggestions "
            f"for {len(tabs)} tabs ({outcome.tier.value} parse)"
        )
        return AnalysisResult.success(suggestions)

    except ProviderError as e:
        logger.warning(f"Analysis failed ({e.kind.value}): {e.message}")
        return AnalysisResult.failure(e.kind, e.message)

    except Exception as e:
        logger.exception("Unexpected error during tab analysis")
        return AnalysisResult.failure(ErrorKind.INTERNAL, f"Unexpected error: {e}")


async def check_connection(config: ProviderConfig, **kwargs) -> AnalysisResult:
    """Run a small analysis against fixed sample tabs to check the provider setup."""
    return await analyze(AnalysisRequest(tabs=SAMPLE_TABS, config=config), **kwargs)


async def fetch_models(
    config: ProviderConfig,
    *,
    client: Optional[httpx.AsyncClient] = None,
    registry: Optional[ProviderRegistry] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[ModelInfo]:
    """
    List the models the configured provider offers.

    Raises:
        ProviderError: If the provider is unknown, misconfigured or unreachable
    """
    provider = (registry or get_registry()).get_provider(config.kind)
    async with HttpTransport(client, timeout=timeout) as transport:
        return await provider.list_models(config, transport)
