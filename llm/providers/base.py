"""
Completion client protocol.

The orchestrator depends only on this protocol, so tests can substitute
fakes for the hosted API.
"""

from typing import Protocol, runtime_checkable

from llm.models import CompletionRequest, CompletionResponse


@runtime_checkable
class CompletionClient(Protocol):
    """Issues one completion call against a hosted text-generation API."""

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """
        Run a single completion.

        Raises:
            CompletionError: with ErrorKind.RATE_LIMIT when throttled,
                ErrorKind.MODEL_ERROR for any other failure.
        """
        ...
