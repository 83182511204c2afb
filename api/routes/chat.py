"""
Chat API Routes for the Capital Code assistant.
"""

import asyncio
import logging
import time
from typing import List, Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status
from pydantic import BaseModel, Field

from config.settings import get_settings
from llm.conversation_store import ConversationStore
from llm.errors import AllModelsFailedError, ChatInputError
from llm.models import ChatReply, ConversationMessage
from llm.orchestrator import ChatOrchestrator, ChatRequest as OrchestratorRequest, validate_messages
from llm.response_formatter import clean_user_message
from ..errors import (
    CUSTOMER_NOT_FOUND,
    EMPTY_MESSAGE,
    INTERNAL_ERROR_MESSAGE,
    RATE_LIMITED_MESSAGE,
    TIMEOUT_MESSAGE,
    UNAVAILABLE_MESSAGE,
    error_response,
)
from ..middleware.metrics import record_chat_outcome, record_completion_latency, record_intent
from ..services import get_conversation_store, get_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request / Response Models ─────────────────────────────────────

class MessageIn(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str = Field(..., max_length=4000)


class ChatRequest(BaseModel):
    messages: List[MessageIn] = Field(..., min_length=1, max_length=50)
    customer_id: Optional[str] = None


class ChatResponse(BaseModel):
    response: str
    model: str
    intent: str
    suggestions: List[str] = []
    tokens_used: Optional[int] = None
    language: str = "es-ES"
    processing_time_ms: float


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


# ── Endpoints ─────────────────────────────────────────────────────

@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def chat(
    request: ChatRequest,
    background_tasks: BackgroundTasks,
    orchestrator: Optional[ChatOrchestrator] = Depends(get_orchestrator),
    store: ConversationStore = Depends(get_conversation_store),
):
    """
    Answer the latest user message.

    1. Validate input  2. Classify intent and generate reply (model fallback)
    3. Clean reply and add navigation  4. Persist turns  5. Return reply
    """
    messages = [
        ConversationMessage(role=m.role, content=clean_user_message(m.content))
        for m in request.messages
    ]

    try:
        validate_messages(messages)
    except ChatInputError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, EMPTY_MESSAGE, str(e))

    if orchestrator is None:
        logger.error("Chat requested but the orchestrator is not configured")
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, UNAVAILABLE_MESSAGE, "orchestrator not configured")

    customer = None
    if request.customer_id:
        customer = await store.get_customer(request.customer_id)
        if not customer:
            return error_response(status.HTTP_404_NOT_FOUND, CUSTOMER_NOT_FOUND)

    timeout = get_settings().request_timeout_seconds
    start = time.time()

    try:
        reply = await asyncio.wait_for(
            orchestrator.process(OrchestratorRequest(messages=messages, customer_id=request.customer_id)),
            timeout=timeout,
        )
    except ChatInputError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, EMPTY_MESSAGE, str(e))
    except AllModelsFailedError as e:
        if e.rate_limited:
            record_chat_outcome("none", "rate_limited")
            return error_response(status.HTTP_429_TOO_MANY_REQUESTS, RATE_LIMITED_MESSAGE, str(e))
        record_chat_outcome("none", "all_failed")
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, UNAVAILABLE_MESSAGE, str(e))
    except asyncio.TimeoutError:
        logger.error(f"Chat request timed out after {timeout}s")
        record_chat_outcome("none", "timeout")
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, TIMEOUT_MESSAGE, f"timed out after {timeout}s")
    except Exception as e:
        logger.exception(f"Chat processing error: {e}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE, str(e))

    record_completion_latency(time.time() - start)
    record_chat_outcome(reply.model_used, "success")
    record_intent(reply.intent)

    if customer:
        await _persist_turns(store, customer.id, messages[-1].content, reply)

    background_tasks.add_task(
        _log_chat_analytics, request.customer_id, messages[-1].content, reply
    )

    return ChatResponse(**reply.to_dict())


# ── Helpers ───────────────────────────────────────────────────────

async def _persist_turns(store: ConversationStore, customer_id: str, user_message: str, reply: ChatReply):
    """Save both turns; storage failures never fail the reply."""
    try:
        await store.save_message(customer_id, "user", user_message)
        await store.save_message(
            customer_id,
            "assistant",
            reply.text,
            metadata={"model": reply.model_used, "intent": reply.intent, "tokens_used": reply.tokens_used},
        )
    except Exception as e:
        logger.error(f"Failed to persist conversation for {customer_id}: {e}")


def _log_chat_analytics(customer_id: Optional[str], message: str, reply: ChatReply):
    """Log chat analytics (background task)."""
    logger.info(
        "Chat analytics",
        extra={
            "customer_id": customer_id,
            "message_length": len(message),
            "intent": reply.intent,
            "model": reply.model_used,
            "tokens_used": reply.tokens_used,
        },
    )
