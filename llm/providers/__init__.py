"""
Completion client implementations.
"""

from .base import CompletionClient
from .openai_provider import OpenAICompletionClient, classify_error

__all__ = ["CompletionClient", "OpenAICompletionClient", "classify_error"]
