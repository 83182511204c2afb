"""
OpenAI-compatible completion client.

Talks to any endpoint that speaks the OpenAI chat completions API
(Groq by default) and translates its failures into ErrorKind values.
"""

import logging
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from llm.errors import CompletionError, ErrorKind
from llm.models import CompletionRequest, CompletionResponse

logger = logging.getLogger(__name__)

RATE_LIMIT_CODES = {"rate_limit_exceeded", "rate_limit_error", "too_many_requests"}


def classify_error(error: Exception) -> ErrorKind:
    """Map an SDK exception to the closed ErrorKind set."""
    if isinstance(error, openai.RateLimitError):
        return ErrorKind.RATE_LIMIT

    if getattr(error, "status_code", None) == 429:
        return ErrorKind.RATE_LIMIT

    code = getattr(error, "code", None)
    if isinstance(code, str) and code.lower() in RATE_LIMIT_CODES:
        return ErrorKind.RATE_LIMIT

    message = str(getattr(error, "message", None) or error).lower()
    if "rate limit" in message or "rate_limit" in message:
        return ErrorKind.RATE_LIMIT

    return ErrorKind.MODEL_ERROR


class OpenAICompletionClient:
    """
    Completion client backed by the OpenAI async SDK.

    Supports Groq, OpenAI and other OpenAI-compatible providers.
    """

    DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        client: Optional[Any] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: API key for the hosted provider
            base_url: OpenAI-compatible base URL
            timeout: Per-call timeout in seconds
            client: Pre-built AsyncOpenAI instance (overrides the other args)
        """
        self.base_url = base_url
        # SDK retries are disabled; the orchestrator owns the retry policy.
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )
        logger.info(f"Completion client initialized: {base_url}")

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Issue one chat completion call."""
        try:
            response = await self._client.chat.completions.create(
                model=request.model.name,
                messages=request.to_api_messages(),
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            )
        except openai.APIError as e:
            kind = classify_error(e)
            raise CompletionError(
                kind,
                f"{request.model.name}: {getattr(e, 'message', None) or e}",
                status_code=getattr(e, "status_code", None),
            ) from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices and choices[0].message else None
        if not content or not content.strip():
            raise CompletionError(ErrorKind.MODEL_ERROR, f"{request.model.name}: empty completion")

        usage = getattr(response, "usage", None)
        total_tokens = getattr(usage, "total_tokens", None) if usage else None

        return CompletionResponse(text=content.strip(), total_tokens=total_tokens)

    async def close(self):
        """Release the underlying HTTP connection pool."""
        await self._client.close()
