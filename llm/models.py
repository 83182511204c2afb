"""
Data model for the chat-response pipeline.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class ConversationMessage:
    """One turn of the exchange, oldest first."""
    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Invalid message role: {self.role!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ModelDescriptor:
    """A selectable hosted text-generation model. Lower priority is tried first."""
    name: str
    max_tokens: int
    priority: int

    def __post_init__(self):
        if not self.name:
            raise ValueError("Model name must not be empty")
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive for {self.name}")
        if self.priority <= 0:
            raise ValueError(f"priority must be positive for {self.name}")


@dataclass
class CompletionRequest:
    """A single completion call, built fresh per attempt."""
    system_instruction: str
    messages: List[ConversationMessage]
    model: ModelDescriptor
    temperature: float
    max_tokens: int

    def to_api_messages(self) -> List[Dict[str, str]]:
        """System instruction first, then the conversation."""
        return [{"role": "system", "content": self.system_instruction}] + [
            m.to_dict() for m in self.messages
        ]


@dataclass
class CompletionResponse:
    """Raw successful output of the completion API."""
    text: str
    total_tokens: Optional[int] = None


@dataclass
class CompletionResult:
    """Post-processed reply returned by the orchestrator."""
    text: str
    model_used: str
    tokens_used: Optional[int] = None
    attempts: int = 1


@dataclass
class ChatReply:
    """Full reply for one inbound chat request."""
    text: str
    model_used: str
    intent: str
    tokens_used: Optional[int] = None
    suggestions: List[str] = field(default_factory=list)
    language: str = "es-ES"
    processing_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "response": self.text,
            "model": self.model_used,
            "intent": self.intent,
            "suggestions": self.suggestions,
            "tokens_used": self.tokens_used,
            "language": self.language,
            "processing_time_ms": self.processing_time_ms,
        }


def parse_model_list(spec: str) -> List[ModelDescriptor]:
    """
    Parse "name:max_tokens,name:max_tokens" into descriptors.

    Priority follows list position, starting at 1.
    """
    models = []
    for position, item in enumerate(p.strip() for p in spec.split(",") if p.strip()):
        name, sep, tokens = item.rpartition(":")
        if not sep or not tokens.strip().isdigit():
            raise ValueError(f"Invalid model entry {item!r}, expected name:max_tokens")
        models.append(ModelDescriptor(name=name.strip(), max_tokens=int(tokens), priority=position + 1))
    if not models:
        raise ValueError("At least one model must be configured")
    return models
