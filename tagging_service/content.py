"""
TabTagger v1 - Page Content Extraction

Content source used to fill TabDescriptor.content before analysis. Pages are
fetched concurrently under a small limit; a page that cannot be read falls back
to a title-only descriptor without affecting the rest of the batch.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from typing import Optional, Sequence

import httpx
from bs4 import BeautifulSoup

from .models import ExtractedContent, RawTab, TabDescriptor

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 4
DEFAULT_MAX_CHARS = 3000

# Pages a browser never lets an extension script into
SPECIAL_URL_PREFIXES = ("chrome://", "about:", "edge://", "chrome-extension://")


def is_special_url(url: str) -> bool:
    return url.startswith(SPECIAL_URL_PREFIXES)


class ContentSource(ABC):
    """
    Abstract content source.

    Implementations return ExtractedContent(success=False) or raise when the
    page cannot be read; both are treated as "no content".
    """

    @abstractmethod
    async def extract(self, tab: RawTab) -> ExtractedContent:
        """Extract title, description and visible text for one tab."""


class HttpContentSource(ContentSource):
    """
    Fetches pages over HTTP and extracts their main text.

    Extracts:
    - Title from og:title, falling back to <title>
    - Description from the description meta tag
    - Visible text of the main content container, or <body>
    """

    MAIN_SELECTORS = [
        "main",
        "[role='main']",
        "article",
        "#content",
        "#main-content",
        ".main-content",
        ".content",
        ".post-content",
        ".article-content",
        ".entry-content",
    ]

    EXCLUDED_TAGS = {
        "script", "style", "noscript", "iframe", "object", "embed", "svg",
        "canvas", "nav", "header", "footer", "aside",
    }

    EXCLUDED_SELECTORS = ".ad, .advertisement, [role='banner'], [role='navigation'], [role='complementary']"

    HEADERS = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    }

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        max_chars: int = DEFAULT_MAX_CHARS,
    ):
        self._client = client
        self.timeout = timeout
        self.max_chars = max_chars

    async def extract(self, tab: RawTab) -> ExtractedContent:
        if is_special_url(tab.url):
            return ExtractedContent(success=True, title=tab.title, content=f"Special page: {tab.title}")

        html_content = await self._fetch(tab.url)
        return self.parse_html(html_content)

    async def _fetch(self, url: str) -> str:
        if self._client is not None:
            response = await self._client.get(url, headers=self.HEADERS, timeout=self.timeout)
            response.raise_for_status()
            return response.text

        async with httpx.AsyncClient(follow_redirects=True, timeout=self.timeout) as client:
            response = await client.get(url, headers=self.HEADERS)
            response.raise_for_status()
            return response.text

    def parse_html(self, html_content: str) -> ExtractedContent:
        """Parse an HTML document into title, description and main text."""
        soup = BeautifulSoup(html_content, "html.parser")

        return ExtractedContent(
            success=True,
            title=self._extract_title(soup),
            description=self._extract_description(soup),
            content=self._extract_text(soup),
        )

    def _extract_title(self, soup: BeautifulSoup) -> Optional[str]:
        og_title = soup.find("meta", attrs={"property": "og:title"})
        if og_title and og_title.get("content"):
            return og_title["content"].strip()

        title_tag = soup.find("title")
        if title_tag:
            title = title_tag.get_text(strip=True)
            if title:
                return title
        return None

    def _extract_description(self, soup: BeautifulSoup) -> str:
        meta = soup.find("meta", attrs={"name": "description"})
        if meta and meta.get("content"):
            return meta["content"].strip()
        return ""

    def _extract_text(self, soup: BeautifulSoup) -> str:
        # Destructive: run after title and description are read
        for tag in soup.find_all(self.EXCLUDED_TAGS):
            tag.decompose()
        for tag in soup.select(self.EXCLUDED_SELECTORS):
            tag.decompose()

        main_content = None
        for selector in self.MAIN_SELECTORS:
            main_content = soup.select_one(selector)
            if main_content:
                break
        if not main_content:
            main_content = soup.find("body") or soup

        text = re.sub(r"\s+", " ", main_content.get_text(separator=" ")).strip()
        if len(text) > self.max_chars:
            text = text[:self.max_chars] + "..."
        return text


def title_only(tab: RawTab) -> TabDescriptor:
    return TabDescriptor(id=tab.id, title=tab.title, url=tab.url)


async def extract_tab_content(tab: RawTab, source: ContentSource) -> TabDescriptor:
    """
    Build a TabDescriptor for one tab, degrading to title-only on any failure.
    """
    try:
        extracted = await source.extract(tab)
    except Exception as e:
        logger.info(f"Failed to extract content from tab {tab.id}: {e}")
        return title_only(tab)

    if not extracted.success:
        logger.info(f"No content available for tab {tab.id}")
        return title_only(tab)

    return TabDescriptor(
        id=tab.id,
        title=extracted.title or tab.title,
        url=tab.url,
        content=extracted.content or "",
        description=extracted.description or "",
    )


async def extract_tabs_content(
    tabs: Sequence[RawTab],
    source: ContentSource,
    max_concurrent: int = DEFAULT_MAX_CONCURRENT,
) -> list[TabDescriptor]:
    """
    Extract content for every tab with at most `max_concurrent` fetches in flight.

    Args:
        tabs: Tabs in the order they should appear in the prompt
        source: Content source to query
        max_concurrent: Concurrency limit

    Returns:
        One TabDescriptor per input tab, in input order
    """
    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def bounded(tab: RawTab) -> TabDescriptor:
        async with semaphore:
            return await extract_tab_content(tab, source)

    descriptors = await asyncio.gather(*(bounded(tab) for tab in tabs))
    logger.info(
        f"Extracted content for {sum(1 for d in descriptors if d.content)}/{len(tabs)} tabs"
    )
    return list(descriptors)
