"""
LLM Orchestration Module for the Capital Code assistant.

This module handles:
- Completion client abstraction (OpenAI-compatible providers)
- System prompt assembly
- Multi-model fallback with rate-limit retry
- Response cleanup and navigation suggestions
"""

from .errors import AllModelsFailedError, ChatInputError, CompletionError, ErrorKind
from .models import ChatReply, CompletionResult, ConversationMessage, ModelDescriptor
from .orchestrator import ChatOrchestrator, ChatRequest, shape_request
from .prompt_builder import PromptBuilder, build_prompt

__all__ = [
    "AllModelsFailedError",
    "ChatInputError",
    "ChatOrchestrator",
    "ChatReply",
    "ChatRequest",
    "CompletionError",
    "CompletionResult",
    "ConversationMessage",
    "ErrorKind",
    "ModelDescriptor",
    "PromptBuilder",
    "build_prompt",
    "shape_request",
]
