"""
TabTagger v1 - Prompt Builder

Renders the tab list and the fixed tagging instructions sent to every provider.
"""

from typing import Sequence

from .models import TabDescriptor


# Hard cap protecting downstream token limits
MAX_CONTENT_CHARS = 5000
TRUNCATION_MARKER = "..."

SYSTEM_PROMPT = (
    "You are a helpful assistant that analyzes browser tabs and suggests organization tags."
)

_PREAMBLE = (
    "You are a browser tab organization assistant. Analyze the following browser tabs "
    "based on their titles and content, and suggest appropriate groups/tags for each tab. "
    "Consider the content type, topic, and purpose."
)

_INSTRUCTIONS = """For each tab, suggest 1-3 relevant tags/groups that would help organize them. Tags should be concise (1-2 words) and descriptive. Base your suggestions on the actual content, not just the URL.

Respond in JSON format:
{
  "suggestions": [
    {
      "tabIndex": 1,
      "tags": ["work", "documentation"]
    },
    {
      "tabIndex": 2,
      "tags": ["social", "news"]
    }
  ]
}

Only respond with the JSON, no additional text."""


def truncate_content(content: str) -> str:
    """Cut content to MAX_CONTENT_CHARS, marking the cut with an ellipsis."""
    if len(content) > MAX_CONTENT_CHARS:
        return content[:MAX_CONTENT_CHARS] + TRUNCATION_MARKER
    return content


def render_tab(index: int, tab: TabDescriptor) -> str:
    """Render one tab entry; `index` is the 1-based position in the prompt."""
    lines = [f'{index}. Title: "{tab.title}"']
    if tab.description:
        lines.append(f"   Description: {tab.description}")
    if tab.content:
        lines.append(f"   Content: {truncate_content(tab.content)}")
    return "\n".join(lines)


def build_prompt(tabs: Sequence[TabDescriptor]) -> str:
    """
    Build the user prompt asking for tag suggestions.

    The 1-based numbering used here is the `tabIndex` the normalizer maps back
    onto `tabs`, so the order of `tabs` must not change between the two.

    Args:
        tabs: Tabs in prompt order (may be empty)

    Returns:
        Prompt text
    """
    tab_list = "\n\n".join(render_tab(i, tab) for i, tab in enumerate(tabs, start=1))
    return f"{_PREAMBLE}\n\nTabs to analyze:\n{tab_list}\n\n{_INSTRUCTIONS}"
