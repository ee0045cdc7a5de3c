"""
TabTagger v1 - Tagging Service

Asks a configurable LLM provider for organizational tags for browser tabs and
normalizes the provider's free-form output into validated tag suggestions.
"""

__version__ = "1.0.0"
