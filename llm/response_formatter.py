"""
Response formatting for the Capital Code assistant.

Post-LLM cleanup so replies render well in the widget and read well through
text-to-speech, plus the deterministic navigation suggestions.
"""

import logging
import re
from typing import List

logger = logging.getLogger(__name__)

PROJECTS_SUGGESTION = (
    "Me encantaría mostrarte nuestro trabajo. 👉 "
    "[Aquí puedes ver todos nuestros proyectos](proyectos) 🎯"
)
MEETING_SUGGESTION = (
    "¡Perfecto! Me alegra tu interés. 📅 "
    "[Aquí puedes agendar una llamada](llamada) 🤝"
)

PROJECTS_KEYWORDS = ("proyectos", "portafolio", "trabajos", "projects", "portfolio")
MEETING_KEYWORDS = (
    "reunión", "reunion", "cita", "videollamada", "llamada",
    "meeting", "appointment", "video call",
)

EMPTY_REPLY = "Lo siento, no pude entender el mensaje. ¿Podrías reformularlo?"


def _keyword_pattern(keywords) -> re.Pattern:
    alternatives = "|".join(re.escape(k) for k in keywords)
    # Plural forms ("citas", "llamadas", "reuniones") count as the keyword
    return re.compile(rf"(?<!\w)(?:{alternatives})(?:es|s)?(?!\w)", re.IGNORECASE)


_PROJECTS_RE = _keyword_pattern(PROJECTS_KEYWORDS)
_MEETING_RE = _keyword_pattern(MEETING_KEYWORDS)

_CODE_FENCE_RE = re.compile(r"```[^\n`]*\n?(.*?)```", re.DOTALL)
_STRAY_FENCE_RE = re.compile(r"```[^\n`]*")
_INLINE_CODE_RE = re.compile(r"`([^`]*)`")
_BOLD_RE = re.compile(r"(\*\*|__)(.+?)\1", re.DOTALL)
_STRIKE_RE = re.compile(r"~~(.+?)~~", re.DOTALL)
_ITALIC_STAR_RE = re.compile(r"\*(?!\s)(.+?)(?<!\s)\*", re.DOTALL)
_ITALIC_UNDERSCORE_RE = re.compile(r"(?<!\w)_(?!\s)(.+?)(?<!\s)_(?!\w)", re.DOTALL)
_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+", re.MULTILINE)
_BLOCKQUOTE_RE = re.compile(r"^\s{0,3}>\s?", re.MULTILINE)
_LIST_BULLET_RE = re.compile(r"^\s*[*+-]\s+", re.MULTILINE)
_LEFTOVER_MARKERS_RE = re.compile(r"\*+|~~")

_WHITESPACE_RE = re.compile(r"\s+")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([,.;:!?])")
_MISSING_SPACE_AFTER_RE = re.compile(r"([.!?])(?=[A-ZÁÉÍÓÚÑ¿¡])")


def strip_markdown(text: str) -> str:
    """Remove emphasis markers, code fences and block markers. Links are kept."""
    text = _CODE_FENCE_RE.sub(lambda m: m.group(1), text)
    text = _STRAY_FENCE_RE.sub("", text)
    text = _INLINE_CODE_RE.sub(lambda m: m.group(1), text)
    text = _BOLD_RE.sub(lambda m: m.group(2), text)
    text = _STRIKE_RE.sub(lambda m: m.group(1), text)
    text = _ITALIC_STAR_RE.sub(lambda m: m.group(1), text)
    text = _ITALIC_UNDERSCORE_RE.sub(lambda m: m.group(1), text)
    text = _HEADING_RE.sub("", text)
    text = _BLOCKQUOTE_RE.sub("", text)
    text = _LIST_BULLET_RE.sub("", text)
    return _LEFTOVER_MARKERS_RE.sub("", text)


def normalize_spacing(text: str) -> str:
    """Collapse whitespace and tidy spacing around sentence punctuation."""
    text = _WHITESPACE_RE.sub(" ", text).strip()
    text = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", text)
    # Only before a capital or an opening ¿/¡, so URLs and decimals stay intact.
    text = _MISSING_SPACE_AFTER_RE.sub(r"\1 ", text)
    return text


def _restore_links(text: str) -> str:
    # "[label] (target)" produced by spacing fixes back to "[label](target)"
    return re.sub(r"\]\s+\(", "](", text)


def clean_response(text: str) -> str:
    """Full cleanup applied to every model reply."""
    cleaned = _restore_links(normalize_spacing(strip_markdown(text)))
    return cleaned or EMPTY_REPLY


def clean_user_message(text: str) -> str:
    """Whitespace-normalize an inbound message before it reaches the model."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def navigation_suggestion(user_message: str) -> str:
    """
    Navigation fragment for the user's latest message, or "" when nothing matches.

    When both groups match, the fragments are joined by a blank line.
    """
    parts: List[str] = []
    if _PROJECTS_RE.search(user_message):
        parts.append(PROJECTS_SUGGESTION)
    if _MEETING_RE.search(user_message):
        parts.append(MEETING_SUGGESTION)
    return "\n\n".join(parts)


def apply_navigation(text: str, suggestion: str, mode: str = "replace") -> str:
    """
    Merge a navigation suggestion into the cleaned reply.

    Each fragment of the suggestion is checked on its own, since the cleaned
    reply has no blank lines. In "replace" mode the reply is discarded unless
    it already contains every fragment. "append" keeps the reply and adds the
    missing fragments after a blank line.
    """
    if not suggestion:
        return text
    missing = [f for f in suggestion.split("\n\n") if f not in text]
    if not missing:
        return text
    if mode == "append":
        return "\n\n".join([text] + missing)
    logger.debug("Navigation suggestion replaced model reply")
    return suggestion
