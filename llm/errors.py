"""
Error taxonomy for the chat pipeline.
"""

from enum import Enum
from typing import Dict, Optional


class ErrorKind(Enum):
    """Failure classes produced by the completion client adapter."""
    RATE_LIMIT = "rate_limit"
    MODEL_ERROR = "model_error"


class ChatInputError(ValueError):
    """Empty or malformed user input. Rejected before any model call."""


class CompletionError(Exception):
    """A single completion call failed."""

    def __init__(self, kind: ErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @property
    def is_rate_limit(self) -> bool:
        return self.kind == ErrorKind.RATE_LIMIT


class AllModelsFailedError(Exception):
    """Every configured model was tried and none produced a reply."""

    def __init__(self, failures: Dict[str, ErrorKind]):
        self.failures = failures
        summary = ", ".join(f"{name}={kind.value}" for name, kind in failures.items())
        super().__init__(f"All models failed: {summary or 'no models configured'}")

    @property
    def rate_limited(self) -> bool:
        """True when every model's final failure was a rate limit."""
        return bool(self.failures) and all(
            kind == ErrorKind.RATE_LIMIT for kind in self.failures.values()
        )
