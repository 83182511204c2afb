"""Tests for reply cleanup and navigation suggestions."""

from llm.response_formatter import (
    EMPTY_REPLY,
    MEETING_SUGGESTION,
    PROJECTS_SUGGESTION,
    apply_navigation,
    clean_response,
    clean_user_message,
    navigation_suggestion,
    normalize_spacing,
    strip_markdown,
)


class TestStripMarkdown:
    def test_bold_and_italic(self):
        assert strip_markdown("**Hola** _amigo_ *bienvenido*") == "Hola amigo bienvenido"

    def test_headings_and_bullets(self):
        text = "## Servicios\n- Web\n* Móvil"
        assert strip_markdown(text) == "Servicios\nWeb\nMóvil"

    def test_code_fence_keeps_content(self):
        assert strip_markdown("```python\nprint(1)\n```").strip() == "print(1)"

    def test_links_survive(self):
        text = "[Aquí puedes agendar una llamada](llamada)"
        assert strip_markdown(text) == text


class TestNormalizeSpacing:
    def test_collapses_whitespace(self):
        assert normalize_spacing("Hola   \n\n  mundo") == "Hola mundo"

    def test_space_before_punctuation(self):
        assert normalize_spacing("Hola , ¿cómo estás ?") == "Hola, ¿cómo estás?"

    def test_space_after_sentence(self):
        assert normalize_spacing("Gracias.¿Algo más?") == "Gracias. ¿Algo más?"

    def test_urls_untouched(self):
        assert normalize_spacing("Visita capitalcode.co") == "Visita capitalcode.co"


class TestCleanResponse:
    def test_full_cleanup(self):
        raw = "**¡Hola!**   Somos *Capital Code* .\n\n[Ver proyectos] (proyectos)"
        assert clean_response(raw) == "¡Hola! Somos Capital Code. [Ver proyectos](proyectos)"

    def test_empty_after_cleanup(self):
        assert clean_response("  ** ** ") == EMPTY_REPLY

    def test_user_message_whitespace(self):
        assert clean_user_message("  hola \n  qué tal ") == "hola qué tal"


class TestNavigation:
    def test_projects(self):
        assert navigation_suggestion("Quiero ver su portafolio") == PROJECTS_SUGGESTION

    def test_meeting(self):
        assert navigation_suggestion("¿Podemos tener una videollamada?") == MEETING_SUGGESTION

    def test_both(self):
        suggestion = navigation_suggestion("Muéstrame tus proyectos y agenda una cita")
        assert suggestion == PROJECTS_SUGGESTION + "\n\n" + MEETING_SUGGESTION

    def test_case_insensitive(self):
        assert navigation_suggestion("PROYECTOS") == PROJECTS_SUGGESTION

    def test_whole_words_only(self):
        # "cita" inside "felicitaciones" is not a meeting request
        assert navigation_suggestion("Felicitaciones por su trabajo") == ""

    def test_nothing_matches(self):
        assert navigation_suggestion("¿Cuánto cuesta una web?") == ""

    def test_replace_mode(self):
        assert apply_navigation("Texto del modelo", MEETING_SUGGESTION) == MEETING_SUGGESTION

    def test_append_mode(self):
        merged = apply_navigation("Texto del modelo", MEETING_SUGGESTION, mode="append")
        assert merged == "Texto del modelo\n\n" + MEETING_SUGGESTION

    def test_already_contained(self):
        text = "Claro. " + MEETING_SUGGESTION
        assert apply_navigation(text, MEETING_SUGGESTION) == text

    def test_no_suggestion(self):
        assert apply_navigation("Texto del modelo", "") == "Texto del modelo"

    def test_plural_meeting_words(self):
        assert navigation_suggestion("¿Puedo agendar citas o videollamadas?") == MEETING_SUGGESTION

    def test_plural_accentless_meeting_word(self):
        assert navigation_suggestion("Quiero reuniones semanales") == MEETING_SUGGESTION

    def test_append_skips_fragments_already_in_reply(self):
        both = PROJECTS_SUGGESTION + "\n\n" + MEETING_SUGGESTION
        reply = clean_response(both)
        merged = apply_navigation(reply, both, mode="append")
        assert merged.count(PROJECTS_SUGGESTION) == 1
        assert merged.count(MEETING_SUGGESTION) == 1

    def test_append_adds_only_missing_fragment(self):
        both = PROJECTS_SUGGESTION + "\n\n" + MEETING_SUGGESTION
        merged = apply_navigation("Claro. " + PROJECTS_SUGGESTION, both, mode="append")
        assert merged == "Claro. " + PROJECTS_SUGGESTION + "\n\n" + MEETING_SUGGESTION

    def test_replace_keeps_reply_containing_every_fragment(self):
        both = PROJECTS_SUGGESTION + "\n\n" + MEETING_SUGGESTION
        reply = clean_response(both)
        assert apply_navigation(reply, both) == reply
