"""Tests for service wiring."""

import asyncio

from api.services import Services
from config.settings import get_settings


class StubClient:
    def __init__(self):
        self.closed = False

    async def complete(self, request):
        raise AssertionError("not called")

    async def close(self):
        self.closed = True


def test_initialize_with_client():
    services = Services()
    stub = StubClient()
    services.initialize(completion_client=stub)

    assert services.is_ready
    health = services.health()
    assert health["orchestrator"] is True
    assert health["models"][0] == "llama-3.3-70b-versatile"

    asyncio.run(services.shutdown())
    assert stub.closed
    assert not services.is_ready


def test_degraded_without_api_key(monkeypatch):
    monkeypatch.setattr(get_settings(), "llm_api_key", None)
    services = Services()
    services.initialize()

    assert services.orchestrator is None
    assert not services.is_ready
    assert services.health()["initialized"] is True
