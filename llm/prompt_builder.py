"""
Prompt Builder for the Capital Code assistant.

Assembles the system instruction injected ahead of the conversation on
every completion call: role directive, business catalog, contextual hints
and the speech-normalized user query.
"""

import re
from typing import Any, Dict, List, Optional, Sequence

from config import catalog
from llm.models import ConversationMessage

# Order matters: "24/7" must be rewritten before "/" would ever be touched.
SPEECH_REPLACEMENTS = [
    ("24/7", "24 7"),
    ("$", " dólares "),
    ("+", " más "),
    ("&", " y "),
    ("*", ""),
    ("“", ""),
    ("”", ""),
]

_WHITESPACE_RE = re.compile(r"\s+")


def format_for_speech(text: str) -> str:
    """Rewrite symbols as spoken words so text-to-speech reads them naturally."""
    for symbol, spoken in SPEECH_REPLACEMENTS:
        text = text.replace(symbol, spoken)
    return _WHITESPACE_RE.sub(" ", text).strip()


class PromptBuilder:
    """
    Builds the system prompt for the assistant.

    The catalog is read-only and shared across requests.
    """

    ROLE_DIRECTIVE = """Eres un asistente virtual amigable y profesional de {brand}. Tu objetivo es ayudar a los usuarios de manera clara y directa.

REGLAS DE RESPUESTA:
- Responde siempre en español
- Sé conciso y directo
- Usa un tono amigable pero profesional
- Evita tecnicismos innecesarios
- Cuando menciones enlaces, hazlo de forma natural
- Ofrece ayuda adicional cuando sea relevante

CONTEXTO DE NAVEGACIÓN:
- Cuando el usuario pregunte por proyectos, ofrece mostrarlos de forma natural
- Cuando el usuario quiera una reunión, ofrece agendar una llamada de forma sencilla
- Nunca menciones rutas internas como {showcase} o {meeting}

EJEMPLOS DE RESPUESTAS NATURALES:
❌ "Puedes ver nuestros proyectos en {showcase}"
✅ "Me encantaría mostrarte nuestro trabajo. [Aquí puedes ver todos nuestros proyectos](proyectos)"
❌ "Agenda una reunión en {meeting}"
✅ "¡Excelente! [Aquí puedes agendar una llamada](llamada) para discutir tu proyecto\""""

    # (keywords, directive) in fixed output order
    CONTEXT_HINTS = [
        (
            ("precio", "costo", "cotiz"),
            "El usuario ha preguntado por precios: explica que cada proyecto se cotiza a medida "
            "y sugiere agendar una llamada para una cotización.",
        ),
        (
            ("web", "página"),
            "El usuario está interesado en desarrollo web: enfoca la respuesta en sitios web y e-commerce.",
        ),
        (
            ("móvil", "app"),
            "El usuario está interesado en aplicaciones móviles: enfoca la respuesta en iOS y Android.",
        ),
        (
            ("proceso",),
            "El usuario quiere entender el proceso: describe los pasos de forma breve y ordenada.",
        ),
    ]

    def __init__(
        self,
        brand_name: str = "Capital Code",
        services: Optional[List[Dict[str, str]]] = None,
        process_steps: Optional[List[Dict[str, str]]] = None,
        guarantees: Optional[List[Dict[str, str]]] = None,
        contact_info: Optional[Dict[str, Any]] = None,
        navigation_links: Optional[Dict[str, str]] = None,
    ):
        self.brand_name = brand_name
        self.services = services if services is not None else catalog.SERVICES
        self.process_steps = process_steps if process_steps is not None else catalog.PROCESS_STEPS
        self.guarantees = guarantees if guarantees is not None else catalog.GUARANTEES
        self.contact_info = contact_info if contact_info is not None else catalog.CONTACT_INFO
        self.navigation_links = navigation_links if navigation_links is not None else catalog.NAVIGATION_LINKS

    def build_prompt(self, user_query: str, history: Sequence[ConversationMessage] = ()) -> str:
        """
        Build the system instruction.

        Args:
            user_query: Latest user message (non-empty, validated by the caller)
            history: Conversation so far, oldest first

        Returns:
            Prompt text, deterministic for identical inputs
        """
        sections = [
            self._role_directive(),
            self._catalog_section(),
        ]

        hints = self.context_hints(history)
        if hints:
            sections.append("INDICACIONES SEGÚN EL CONTEXTO:\n" + "\n".join(f"- {h}" for h in hints))

        sections.append(f"Consulta del Usuario:\n{format_for_speech(user_query)}")
        return "\n\n".join(sections)

    def context_hints(self, history: Sequence[ConversationMessage]) -> List[str]:
        """Directives for each keyword group mentioned anywhere in the history."""
        text = " ".join(m.content.lower() for m in history)
        return [
            directive
            for keywords, directive in self.CONTEXT_HINTS
            if any(k in text for k in keywords)
        ]

    def _role_directive(self) -> str:
        return self.ROLE_DIRECTIVE.format(
            brand=self.brand_name,
            showcase=self.navigation_links.get("showcase", "/showcase"),
            meeting=self.navigation_links.get("meeting", "/meeting"),
        )

    def _catalog_section(self) -> str:
        services = "\n".join(
            f"- {s['title']}: {format_for_speech(s['description'])}" for s in self.services
        )
        steps = "\n".join(f"- {s['step']}: {s['description']}" for s in self.process_steps)
        guarantees = "\n".join(
            f"- {g['title']}: {format_for_speech(g['description'])}" for g in self.guarantees
        )
        whatsapp = "\n".join(
            f"    {n['flag']} {n['country']}: {n['number']}"
            for n in self.contact_info.get("whatsapp_numbers", [])
        )

        return (
            f"Información de {self.brand_name}:\n\n"
            f"Servicios:\n{services}\n\n"
            f"Proceso:\n{steps}\n\n"
            f"Garantías:\n{guarantees}\n\n"
            f"Contacto:\n- WhatsApp:\n{whatsapp}\n- Email: {self.contact_info.get('email', '')}"
        )


_default_builder = PromptBuilder()


def build_prompt(user_query: str, history: Sequence[ConversationMessage] = ()) -> str:
    """Build the system instruction with the default catalog."""
    return _default_builder.build_prompt(user_query, history)
