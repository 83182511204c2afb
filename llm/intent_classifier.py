"""
Intent Classification for the Capital Code assistant.

Rule-based keyword matching first; optionally asks a hosted model when no
keyword matches. Any failure yields Intent.GENERAL.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from llm.errors import CompletionError
from llm.models import CompletionRequest, ConversationMessage, ModelDescriptor

logger = logging.getLogger(__name__)


class Intent(Enum):
    """Visitor intent categories."""
    SERVICES = "services"      # What do you offer?
    PRICING = "pricing"        # Prices, quotes
    PROJECTS = "projects"      # Portfolio
    MEETING = "meeting"        # Wants a call/meeting
    PROCESS = "process"        # How do you work?
    GUARANTEES = "guarantees"  # Delivery, support, warranties
    CONTACT = "contact"        # Email, WhatsApp, support
    GREETING = "greeting"      # Hola, buenas
    GENERAL = "general"        # Unable to determine


@dataclass
class IntentResult:
    """Result of intent classification."""
    intent: Intent
    confidence: float = 0.0
    matched_keywords: List[str] = field(default_factory=list)
    source: str = "rules"


class IntentClassifier:
    """
    Classifies visitor intent from the latest message.

    Keyword scoring covers almost every widget question; the model fallback
    is only consulted for messages with no keyword hits.
    """

    INTENT_KEYWORDS = {
        Intent.SERVICES: [
            "servicio", "servicios", "ofrecen", "hacen", "desarrollo", "software",
            "aplicación", "aplicaciones", "app", "web", "e-commerce", "tienda en línea",
            "consultoría", "services",
        ],
        Intent.PRICING: [
            "precio", "precios", "costo", "costos", "cuánto", "cuanto", "cotización",
            "cotizar", "presupuesto", "tarifa", "price", "pricing", "cost",
        ],
        Intent.PROJECTS: [
            "proyectos", "portafolio", "trabajos", "ejemplos", "casos de éxito",
            "projects", "portfolio",
        ],
        Intent.MEETING: [
            "reunión", "reunion", "cita", "llamada", "videollamada", "agendar", "agenda",
            "meeting", "appointment",
        ],
        Intent.PROCESS: [
            "proceso", "cómo trabajan", "como trabajan", "pasos", "metodología", "etapas",
        ],
        Intent.GUARANTEES: [
            "garantía", "garantías", "garantia", "garantias", "entrega", "tiempo de entrega",
            "mantenimiento", "seguridad",
        ],
        Intent.CONTACT: [
            "contacto", "contactar", "correo", "email", "whatsapp", "teléfono", "telefono",
            "soporte", "support",
        ],
        Intent.GREETING: [
            "hola", "buenas", "buenos días", "buenos dias", "buenas tardes", "hello", "hi",
        ],
    }

    # Greetings only win when nothing else matched
    TIE_BREAK_ORDER = [
        Intent.MEETING, Intent.PRICING, Intent.PROJECTS, Intent.PROCESS,
        Intent.GUARANTEES, Intent.CONTACT, Intent.SERVICES, Intent.GREETING,
    ]

    def __init__(
        self,
        llm_client: Optional[object] = None,
        llm_model: Optional[ModelDescriptor] = None,
    ):
        """
        Initialize the classifier.

        Args:
            llm_client: Optional completion client for the model fallback
            llm_model: Model used for the fallback call
        """
        self.llm_client = llm_client
        self.llm_model = llm_model
        self._patterns: Dict[Intent, List[Tuple[str, re.Pattern]]] = {
            intent: [(k, re.compile(rf"(?<!\w){re.escape(k)}(?!\w)")) for k in keywords]
            for intent, keywords in self.INTENT_KEYWORDS.items()
        }

    async def classify(
        self,
        message: str,
        history: Sequence[ConversationMessage] = (),
        use_llm: bool = False,
    ) -> IntentResult:
        """
        Classify the intent of a message.

        Args:
            message: Latest user message
            history: Previous turns (used as context for the model fallback)
            use_llm: Whether to ask the model when no keyword matches

        Returns:
            IntentResult; Intent.GENERAL when undetermined
        """
        result = self._rule_based_classify(message)

        if result.intent == Intent.GENERAL and use_llm and self.llm_client and self.llm_model:
            llm_result = await self._llm_classify(message, history)
            if llm_result:
                return llm_result

        return result

    def _rule_based_classify(self, message: str) -> IntentResult:
        """Score each intent by keyword hits."""
        text = message.lower()
        scores: Dict[Intent, List[str]] = {}

        for intent, patterns in self._patterns.items():
            hits = [keyword for keyword, pattern in patterns if pattern.search(text)]
            if hits:
                scores[intent] = hits

        if not scores:
            return IntentResult(intent=Intent.GENERAL, confidence=0.0)

        best_count = max(len(hits) for hits in scores.values())
        best = next(
            intent for intent in self.TIE_BREAK_ORDER
            if len(scores.get(intent, [])) == best_count
        )
        total = sum(len(hits) for hits in scores.values())

        return IntentResult(
            intent=best,
            confidence=round(best_count / total, 2),
            matched_keywords=scores[best],
        )

    async def _llm_classify(
        self,
        message: str,
        history: Sequence[ConversationMessage],
    ) -> Optional[IntentResult]:
        """Ask the model for a one-word intent label."""
        labels = ", ".join(i.value for i in Intent)
        context = "\n".join(f"{m.role}: {m.content}" for m in list(history)[-4:])
        instruction = (
            "Clasifica la intención del último mensaje del usuario. "
            f"Responde solo con una de estas etiquetas: {labels}.\n"
            f"Conversación reciente:\n{context}"
        )
        request = CompletionRequest(
            system_instruction=instruction,
            messages=[ConversationMessage(role="user", content=message)],
            model=self.llm_model,
            temperature=0.0,
            max_tokens=10,
        )

        try:
            response = await self.llm_client.complete(request)
        except CompletionError as e:
            logger.warning(f"LLM intent classification failed: {e}")
            return None

        label = response.text.strip().lower().strip(".\"' ")
        try:
            return IntentResult(intent=Intent(label), confidence=0.6, source="llm")
        except ValueError:
            logger.debug(f"Unknown intent label from model: {label!r}")
            return None


class QuickReplies:
    """Follow-up suggestions shown as quick-reply chips after each answer."""

    DEFAULT = [
        "¿Qué servicios ofrecen?",
        "¿Cuáles son los precios?",
        "Agenda una reunión",
        "¿Qué garantías tienen?",
        "¿Cómo contactar con soporte?",
    ]

    BY_INTENT = {
        Intent.SERVICES: ["¿Cuáles son los precios?", "Ver proyectos", "Agenda una reunión"],
        Intent.PRICING: ["Agenda una reunión", "¿Qué incluye el mantenimiento?", "¿Cuánto tarda un proyecto?"],
        Intent.PROJECTS: ["Agenda una reunión", "¿Qué servicios ofrecen?"],
        Intent.MEETING: ["¿Cómo es el proceso?", "¿Qué garantías tienen?"],
        Intent.PROCESS: ["Agenda una reunión", "¿Cuánto tarda un proyecto?", "¿Cuáles son los precios?"],
        Intent.GUARANTEES: ["¿Qué servicios ofrecen?", "Agenda una reunión"],
        Intent.CONTACT: ["Agenda una reunión", "¿Qué servicios ofrecen?"],
        Intent.GREETING: ["¿Qué servicios ofrecen?", "Ver proyectos", "Agenda una reunión"],
    }

    @classmethod
    def for_intent(cls, intent: Intent, limit: int = 4) -> List[str]:
        return list(cls.BY_INTENT.get(intent, cls.DEFAULT))[:limit]
