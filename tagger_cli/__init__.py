"""
TabTagger v1 - CLI Module

Command-line access to tab analysis, model listing and connection tests.
"""

from .cli import cli, main

__all__ = ["cli", "main"]
