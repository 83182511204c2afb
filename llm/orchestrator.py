"""
Chat Orchestrator for the Capital Code assistant.

Drives the hosted-model completion calls for one chat request: model
selection in priority order, bounded rate-limit retry, request shaping,
response cleanup and navigation suggestions.
"""

import asyncio
import logging
import random
import re
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from .errors import AllModelsFailedError, ChatInputError, CompletionError, ErrorKind
from .intent_classifier import Intent, IntentClassifier, IntentResult, QuickReplies
from .models import (
    ChatReply,
    CompletionRequest,
    CompletionResponse,
    CompletionResult,
    ConversationMessage,
    ModelDescriptor,
)
from .prompt_builder import PromptBuilder
from .response_formatter import apply_navigation, clean_response, navigation_suggestion

logger = logging.getLogger(__name__)

DISINTEREST_PHRASES = ("en nada", "nada más", "nada mas", "no gracias", "no me interesa")
_NEGATION_RE = re.compile(r"(?<!\w)(?:no|nada)(?!\w)")

DEFAULT_MAX_TOKENS = 1000


@dataclass
class ChatRequest:
    """Inbound chat request: the conversation so far, ending with the new user message."""
    messages: List[ConversationMessage]
    customer_id: Optional[str] = None


def shape_request(message: str, model: ModelDescriptor) -> Tuple[float, int]:
    """
    Pick (temperature, max_tokens) from the latest user message.

    Precedence: disinterested, negative, short answer, default.
    """
    text = message.lower().strip()

    is_disinterested = len(text) <= 5 or any(p in text for p in DISINTEREST_PHRASES)
    is_negative = bool(_NEGATION_RE.search(text))
    is_short_answer = len(text) <= 10

    if is_disinterested:
        temperature, max_tokens = 0.5, 100
    elif is_negative:
        temperature, max_tokens = 0.6, 150
    elif is_short_answer:
        temperature, max_tokens = 0.7, 200
    else:
        temperature, max_tokens = 0.7, DEFAULT_MAX_TOKENS

    return temperature, min(max_tokens, model.max_tokens)


def validate_messages(messages: Sequence[ConversationMessage]) -> str:
    """
    Check the conversation ends with a non-empty user message.

    Returns:
        The latest user message

    Raises:
        ChatInputError: if the conversation is empty or malformed
    """
    if not messages:
        raise ChatInputError("No messages provided")
    last = messages[-1]
    if last.role != "user":
        raise ChatInputError("The last message must come from the user")
    if not last.content or not last.content.strip():
        raise ChatInputError("Empty message")
    return last.content.strip()


class ChatOrchestrator:
    """
    Orchestrates the chat pipeline.

    Pipeline:
    1. Validate the conversation
    2. Build the system prompt
    3. Classify intent and run the completion concurrently
    4. Try models in ascending priority; retry the same model on rate limits
    5. Clean the reply and merge navigation suggestions
    6. Return reply with quick-reply suggestions
    """

    def __init__(
        self,
        client,
        models: Sequence[ModelDescriptor],
        prompt_builder: Optional[PromptBuilder] = None,
        intent_classifier: Optional[IntentClassifier] = None,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        navigation_mode: str = "replace",
        use_llm_intent: bool = False,
        intent_timeout: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            client: Completion client (see llm.providers.CompletionClient)
            models: Models to try; ordered by priority here
            prompt_builder: Builder for the system instruction
            intent_classifier: Optional intent classifier
            max_attempts: Attempts per model when rate limited
            base_delay: First backoff delay in seconds, doubled per attempt
            navigation_mode: "replace" or "append"
            use_llm_intent: Let the classifier ask the model when keywords miss
            intent_timeout: Upper bound for intent classification in seconds
            sleep: Coroutine used for backoff waits
            rng: Random source for backoff jitter
        """
        if not models:
            raise ValueError("At least one model is required")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if navigation_mode not in ("replace", "append"):
            raise ValueError(f"Unsupported navigation mode: {navigation_mode}")

        priorities = [m.priority for m in models]
        if len(set(priorities)) != len(priorities):
            raise ValueError("Model priorities must be distinct")

        self.client = client
        self.models: Tuple[ModelDescriptor, ...] = tuple(sorted(models, key=lambda m: m.priority))
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.intent_classifier = intent_classifier
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.navigation_mode = navigation_mode
        self.use_llm_intent = use_llm_intent
        self.intent_timeout = intent_timeout
        self._sleep = sleep
        self._rng = rng or random.Random()

        logger.info(
            f"Chat orchestrator ready: models={[m.name for m in self.models]}, "
            f"max_attempts={max_attempts}"
        )

    async def process(self, request: ChatRequest) -> ChatReply:
        """
        Process a chat request through the full pipeline.

        Args:
            request: Chat request

        Returns:
            Chat reply

        Raises:
            ChatInputError: malformed conversation, before any model call
            AllModelsFailedError: no model produced a reply
        """
        start_time = time.time()
        user_message = validate_messages(request.messages)
        history = request.messages[:-1]

        # Independent calls: intent never fails the request
        intent_task = asyncio.ensure_future(self._classify_intent(user_message, history))
        try:
            result = await self.complete(request.messages)
            intent_result = await intent_task
        finally:
            # No classifier call outlives a failed or cancelled completion
            if not intent_task.done():
                intent_task.cancel()

        processing_time = (time.time() - start_time) * 1000

        return ChatReply(
            text=result.text,
            model_used=result.model_used,
            tokens_used=result.tokens_used,
            intent=intent_result.intent.value,
            suggestions=QuickReplies.for_intent(intent_result.intent),
            processing_time_ms=round(processing_time, 2),
        )

    async def complete(self, messages: Sequence[ConversationMessage]) -> CompletionResult:
        """
        Run the model fallback state machine for one conversation.

        Raises:
            ChatInputError: malformed conversation
            AllModelsFailedError: every model failed
        """
        user_message = validate_messages(messages)
        history = list(messages[:-1])
        system_instruction = self.prompt_builder.build_prompt(user_message, history)

        failures: Dict[str, ErrorKind] = {}
        attempts = 0

        for model in self.models:
            temperature, max_tokens = shape_request(user_message, model)
            request = CompletionRequest(
                system_instruction=system_instruction,
                messages=list(messages),
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
            )

            for attempt in range(1, self.max_attempts + 1):
                attempts += 1
                logger.info(f"Attempting model {model.name} (attempt {attempt}/{self.max_attempts})")
                try:
                    response = await self.client.complete(request)
                except CompletionError as e:
                    failures[model.name] = e.kind
                    if e.is_rate_limit and attempt < self.max_attempts:
                        delay = self._backoff_delay(attempt)
                        logger.warning(f"Rate limited on {model.name}, retrying in {delay:.2f}s")
                        await self._sleep(delay)
                        continue
                    logger.warning(f"Model {model.name} failed ({e.kind.value}): {e}")
                    break

                failures.pop(model.name, None)
                return self._finalize(response, model, user_message, attempts)

        logger.error(f"All models failed after {attempts} attempts: {failures}")
        raise AllModelsFailedError(failures)

    def _finalize(
        self,
        response: CompletionResponse,
        model: ModelDescriptor,
        user_message: str,
        attempts: int,
    ) -> CompletionResult:
        """Clean the raw reply and merge navigation suggestions."""
        text = clean_response(response.text)
        suggestion = navigation_suggestion(user_message)
        text = apply_navigation(text, suggestion, self.navigation_mode)

        logger.info(f"Reply generated by {model.name} after {attempts} attempt(s)")
        return CompletionResult(
            text=text,
            model_used=model.name,
            tokens_used=response.total_tokens,
            attempts=attempts,
        )

    def _backoff_delay(self, attempt: int) -> float:
        """Exponential backoff with jitter: base * 2^(attempt-1) + U(0, base)."""
        return self.base_delay * (2 ** (attempt - 1)) + self._rng.uniform(0, self.base_delay)

    async def _classify_intent(
        self,
        message: str,
        history: Sequence[ConversationMessage],
    ) -> IntentResult:
        """Classify intent, falling back to GENERAL on any failure or timeout."""
        if not self.intent_classifier:
            return IntentResult(intent=Intent.GENERAL)

        try:
            return await asyncio.wait_for(
                self.intent_classifier.classify(message, history, use_llm=self.use_llm_intent),
                timeout=self.intent_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Intent classification timed out, using 'general'")
        except Exception as e:
            logger.warning(f"Intent classification failed, using 'general': {e}")
        return IntentResult(intent=Intent.GENERAL)
