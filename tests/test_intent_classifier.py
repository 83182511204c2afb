"""Tests for intent classification and quick replies."""

import asyncio

import pytest

from llm.errors import CompletionError, ErrorKind
from llm.intent_classifier import Intent, IntentClassifier, QuickReplies
from llm.models import CompletionResponse, ModelDescriptor


@pytest.fixture
def classifier():
    return IntentClassifier()


def classify(classifier, message, **kwargs):
    return asyncio.run(classifier.classify(message, **kwargs))


class StubClient:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = 0

    async def complete(self, request):
        self.calls += 1
        if self.error:
            raise self.error
        return CompletionResponse(text=self.reply)


class TestIntentClassifier:
    def test_services(self, classifier):
        assert classify(classifier, "¿Qué servicios ofrecen?").intent == Intent.SERVICES

    def test_meeting(self, classifier):
        result = classify(classifier, "Agenda una reunión")
        assert result.intent == Intent.MEETING
        assert set(result.matched_keywords) == {"agenda", "reunión"}

    def test_pricing(self, classifier):
        assert classify(classifier, "¿Cuáles son los precios?").intent == Intent.PRICING

    def test_projects(self, classifier):
        assert classify(classifier, "Quiero ver su portafolio").intent == Intent.PROJECTS

    def test_contact(self, classifier):
        assert classify(classifier, "¿Cómo contactar con soporte?").intent == Intent.CONTACT

    def test_guarantees(self, classifier):
        assert classify(classifier, "¿Qué garantías tienen?").intent == Intent.GUARANTEES

    def test_greeting(self, classifier):
        assert classify(classifier, "Hola").intent == Intent.GREETING

    def test_greeting_loses_ties(self, classifier):
        assert classify(classifier, "Hola, ¿cuánto vale?").intent == Intent.PRICING

    def test_unknown_is_general(self, classifier):
        result = classify(classifier, "asdfgh")
        assert result.intent == Intent.GENERAL
        assert result.confidence == 0.0


class TestLLMFallback:
    model = ModelDescriptor(name="m", max_tokens=100, priority=1)

    def test_used_when_no_keyword_matches(self):
        stub = StubClient(reply="Meeting.")
        classifier = IntentClassifier(llm_client=stub, llm_model=self.model)
        result = classify(classifier, "asdfgh", use_llm=True)
        assert result.intent == Intent.MEETING
        assert result.source == "llm"

    def test_not_used_when_keywords_match(self):
        stub = StubClient(reply="meeting")
        classifier = IntentClassifier(llm_client=stub, llm_model=self.model)
        assert classify(classifier, "¿Qué servicios ofrecen?", use_llm=True).intent == Intent.SERVICES
        assert stub.calls == 0

    def test_model_failure_is_general(self):
        stub = StubClient(error=CompletionError(ErrorKind.MODEL_ERROR, "boom"))
        classifier = IntentClassifier(llm_client=stub, llm_model=self.model)
        assert classify(classifier, "asdfgh", use_llm=True).intent == Intent.GENERAL

    def test_unknown_label_is_general(self):
        stub = StubClient(reply="something else")
        classifier = IntentClassifier(llm_client=stub, llm_model=self.model)
        assert classify(classifier, "asdfgh", use_llm=True).intent == Intent.GENERAL


class TestQuickReplies:
    def test_general_uses_defaults(self):
        assert QuickReplies.for_intent(Intent.GENERAL) == QuickReplies.DEFAULT[:4]

    def test_limit(self):
        assert len(QuickReplies.for_intent(Intent.PRICING, limit=2)) == 2
