"""
TabTagger v1 - Response Normalizer

Turns raw model output into tag suggestions. Providers are told to answer with
JSON, but models sometimes wrap it in prose, prepend a <think> block or ignore
the format entirely, so parsing is two-tier: strict JSON first, then a
line-based heuristic. Nothing here raises; the worst case is an empty list.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

from .models import TabDescriptor, TagSuggestion

logger = logging.getLogger(__name__)

THINK_BLOCK_RE = re.compile(r"<think>.*?</think>", re.IGNORECASE | re.DOTALL)

# "Tab 1: news, tech" / "#2 work, docs"
FALLBACK_LINE_RE = re.compile(r"(?:tab|#)\s*(\d+)[:\s]+([a-zA-Z0-9\s,\-_]+)", re.IGNORECASE)

MAX_FALLBACK_TAGS = 3
MAX_TAG_LENGTH = 20


class ParseTier(str, Enum):
    """Which parsing tier produced the suggestions"""
    STRICT = "strict"
    FALLBACK = "fallback"
    EMPTY = "empty"


@dataclass(frozen=True)
class ParseOutcome:
    tier: ParseTier
    suggestions: list[TagSuggestion] = field(default_factory=list)


@dataclass(frozen=True)
class DecodeResult:
    ok: bool
    value: Any = None


def strip_think_blocks(text: str) -> str:
    """Remove chain-of-thought <think>...</think> blocks, tags included."""
    return THINK_BLOCK_RE.sub("", text)


def json_candidate(text: str) -> str:
    """Slice from the first '{' to the last '}', or return the text unchanged."""
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and start < end:
        return text[start:end + 1]
    return text


def _decode_json(text: str) -> DecodeResult:
    try:
        return DecodeResult(ok=True, value=json.loads(text))
    except ValueError:
        return DecodeResult(ok=False)


def _tab_position(tab_index: Any) -> Optional[int]:
    """0-based position for a 1-based tabIndex, or None if it is not a whole number."""
    if isinstance(tab_index, bool):
        return None
    if isinstance(tab_index, int):
        return tab_index - 1
    if isinstance(tab_index, float) and tab_index.is_integer():
        return int(tab_index) - 1
    if isinstance(tab_index, str):
        digits = tab_index.strip()
        # isdigit alone accepts superscripts and other non-ASCII digits
        if digits.isascii() and digits.isdigit():
            return int(digits) - 1
    return None


def _given_tags(tags: Any) -> Optional[list[str]]:
    if isinstance(tags, list):
        return [tag for tag in tags if isinstance(tag, str)]
    if isinstance(tags, str):
        return [tags]
    return None


def _strict_entry(entry: Any, tabs: Sequence[TabDescriptor]) -> Optional[TagSuggestion]:
    if not isinstance(entry, dict):
        return None
    position = _tab_position(entry.get("tabIndex"))
    if position is None or not 0 <= position < len(tabs):
        return None
    tags = _given_tags(entry.get("tags"))
    if tags is None:
        return None
    return TagSuggestion(tab_id=tabs[position].id, tags=tags)


def parse_strict(text: str, tabs: Sequence[TabDescriptor]) -> Optional[list[TagSuggestion]]:
    """
    Decode the JSON answer format.

    Returns:
        Suggestions in the order of the decoded array (possibly empty), or None
        if the text is not JSON carrying a `suggestions` array
    """
    decoded = _decode_json(json_candidate(text))
    if not decoded.ok or not isinstance(decoded.value, dict):
        return None
    entries = decoded.value.get("suggestions")
    if not isinstance(entries, list):
        return None

    suggestions = []
    for entry in entries:
        try:
            suggestion = _strict_entry(entry, tabs)
        except (TypeError, ValueError) as e:
            logger.debug(f"Skipping malformed suggestion entry {entry!r}: {e}")
            continue
        if suggestion is not None:
            suggestions.append(suggestion)
    return suggestions


def parse_fallback(text: str, tabs: Sequence[TabDescriptor]) -> list[TagSuggestion]:
    """Recover "Tab N: tag, tag" style lines from a prose answer."""
    suggestions = []
    for line in text.split("\n"):
        match = FALLBACK_LINE_RE.search(line)
        if not match:
            continue
        position = int(match.group(1)) - 1
        tags = [tag.strip().lower() for tag in match.group(2).split(",")]
        tags = [tag for tag in tags if 0 < len(tag) < MAX_TAG_LENGTH][:MAX_FALLBACK_TAGS]
        if 0 <= position < len(tabs) and tags:
            suggestions.append(TagSuggestion(tab_id=tabs[position].id, tags=tags))
    return suggestions


def normalize(raw: str, tabs: Sequence[TabDescriptor]) -> ParseOutcome:
    """
    Parse raw model output and report which tier produced the result.

    Args:
        raw: Text returned by a provider adapter
        tabs: The tabs in the order they were numbered in the prompt

    Returns:
        ParseOutcome; never raises
    """
    try:
        text = raw if isinstance(raw, str) else str(raw or "")
        strict = parse_strict(strip_think_blocks(text), tabs)
        if strict is not None:
            return ParseOutcome(ParseTier.STRICT, strict)

        logger.info("Model output was not the expected JSON, trying line-based fallback")
        logger.debug(f"Raw model output: {text[:1000]!r}")
        fallback = parse_fallback(text, tabs)
        if fallback:
            return ParseOutcome(ParseTier.FALLBACK, fallback)
    except Exception:
        logger.exception("Unexpected error while parsing model output")
    return ParseOutcome(ParseTier.EMPTY, [])


def parse(raw: str, tabs: Sequence[TabDescriptor]) -> list[TagSuggestion]:
    """Parse raw model output into tag suggestions (possibly empty)."""
    return normalize(raw, tabs).suggestions
