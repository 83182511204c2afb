"""Shared fixtures for Capital Code assistant tests."""

import os
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient

# Ensure we use test settings
os.environ.setdefault("LLM_API_KEY", "test-key")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "10000")
os.environ.setdefault("RETRY_BASE_DELAY", "0")
os.environ.setdefault("ENVIRONMENT", "test")

from llm.errors import CompletionError, ErrorKind  # noqa: E402
from llm.models import CompletionResponse, ModelDescriptor  # noqa: E402


class FakeCompletionClient:
    """
    Scripted completion client.

    `script` maps a model name to a list of outcomes consumed in order: a
    string is returned as the reply, an ErrorKind is raised as a failure.
    Once a list is exhausted its last outcome repeats.
    """

    def __init__(self, script: Dict[str, List], tokens: int = 42):
        self.script = {name: list(outcomes) for name, outcomes in script.items()}
        self.tokens = tokens
        self.calls = []

    async def complete(self, request):
        self.calls.append(request)
        outcomes = self.script.get(request.model.name) or [ErrorKind.MODEL_ERROR]
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, ErrorKind):
            raise CompletionError(outcome, f"{request.model.name} failed with {outcome.value}")
        return CompletionResponse(text=outcome, total_tokens=self.tokens)

    @property
    def models_called(self) -> List[str]:
        return [r.model.name for r in self.calls]


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float):
        self.delays.append(delay)


@pytest.fixture
def models():
    return [
        ModelDescriptor(name="primary", max_tokens=32768, priority=1),
        ModelDescriptor(name="secondary", max_tokens=32768, priority=2),
        ModelDescriptor(name="tertiary", max_tokens=8192, priority=3),
    ]


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def make_orchestrator(models, recording_sleep):
    """Build an orchestrator around a scripted client."""
    import random

    from llm.intent_classifier import IntentClassifier
    from llm.orchestrator import ChatOrchestrator

    def _make(script, **kwargs):
        client = FakeCompletionClient(script)
        kwargs.setdefault("intent_classifier", IntentClassifier())
        kwargs.setdefault("base_delay", 1.0)
        orchestrator = ChatOrchestrator(
            client=client,
            models=kwargs.pop("models", models),
            sleep=recording_sleep,
            rng=random.Random(7),
            **kwargs,
        )
        return orchestrator, client

    return _make


@pytest.fixture
def memory_store():
    from llm.conversation_store import InMemoryConversationStore
    return InMemoryConversationStore()


@pytest.fixture
def client_factory(make_orchestrator, memory_store):
    """
    Create a FastAPI test client whose orchestrator follows `script`.

    Pass script=None to simulate a deployment without a configured model.
    """
    from api.main import app
    from api.services import get_conversation_store, get_orchestrator

    def _factory(script=None, **kwargs):
        if script is None:
            orchestrator, fake = None, None
        else:
            orchestrator, fake = make_orchestrator(script, **kwargs)
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        app.dependency_overrides[get_conversation_store] = lambda: memory_store
        return TestClient(app), fake

    yield _factory
    app.dependency_overrides.clear()


@pytest.fixture
def client(client_factory):
    """Test client whose primary model always answers."""
    test_client, _ = client_factory({"primary": ["Hola, soy el asistente de Capital Code."]})
    return test_client
