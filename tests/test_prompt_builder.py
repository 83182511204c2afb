"""Tests for the system prompt builder."""

import pytest

from llm.models import ConversationMessage
from llm.prompt_builder import PromptBuilder, build_prompt, format_for_speech


@pytest.fixture
def builder():
    return PromptBuilder(brand_name="Capital Code")


def msg(role, content):
    return ConversationMessage(role=role, content=content)


class TestFormatForSpeech:
    def test_symbols_become_words(self):
        assert format_for_speech("Web + móvil & soporte") == "Web más móvil y soporte"

    def test_dollar(self):
        assert format_for_speech("Desde $500") == "Desde dólares 500"

    def test_around_the_clock_before_other_symbols(self):
        assert format_for_speech("Soporte 24/7") == "Soporte 24 7"

    def test_asterisks_and_quotes_removed(self):
        assert format_for_speech("*“Hola”*") == "Hola"


class TestBuildPrompt:
    def test_sections_in_order(self, builder):
        prompt = builder.build_prompt("¿Qué servicios ofrecen?")
        role = prompt.index("Eres un asistente virtual")
        catalog = prompt.index("Información de Capital Code:")
        query = prompt.index("Consulta del Usuario:")
        assert role < catalog < query
        assert prompt.endswith("Consulta del Usuario:\n¿Qué servicios ofrecen?")

    def test_catalog_content(self, builder):
        prompt = builder.build_prompt("Hola")
        assert "Servicios:" in prompt
        assert "Desarrollo Web Personalizado" in prompt
        assert "Proceso:" in prompt
        assert "Garantías:" in prompt
        assert "capitalcodecol@gmail.com" in prompt
        # Catalog text is speech-normalized
        assert "Soporte 24/7:" in prompt
        assert "soporte 24 7 para todos" in prompt

    def test_no_hints_without_history(self, builder):
        assert "INDICACIONES SEGÚN EL CONTEXTO" not in builder.build_prompt("Hola")

    def test_hints_follow_fixed_order(self, builder):
        history = [
            msg("user", "Me interesa una app"),
            msg("assistant", "Claro"),
            msg("user", "¿Cuál es el precio?"),
        ]
        hints = builder.context_hints(history)
        assert len(hints) == 2
        assert "precios" in hints[0]
        assert "aplicaciones móviles" in hints[1]
        prompt = builder.build_prompt("Gracias", history)
        assert "INDICACIONES SEGÚN EL CONTEXTO:\n- " + hints[0] in prompt

    def test_query_is_speech_normalized(self, builder):
        prompt = builder.build_prompt("¿Cuánto cuesta web + app?")
        assert prompt.endswith("¿Cuánto cuesta web más app?")

    def test_deterministic(self, builder):
        history = [msg("user", "¿Cómo es el proceso?")]
        assert builder.build_prompt("Hola", history) == builder.build_prompt("Hola", history)

    def test_raw_routes_only_as_counterexamples(self, builder):
        prompt = builder.build_prompt("Hola")
        assert "Nunca menciones rutas internas como /showcase o /meeting" in prompt

    def test_module_level_builder(self):
        assert build_prompt("Hola").startswith("Eres un asistente virtual amigable y profesional de")
