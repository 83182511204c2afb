"""
Customer API Routes.

Visitors register with name and email before chatting; the returned id is
sent back as `customer_id` so the conversation can be stored.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from llm.conversation_store import ConversationStore
from ..errors import CUSTOMER_NOT_FOUND, error_response
from ..services import get_conversation_store

logger = logging.getLogger(__name__)

router = APIRouter()

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)


class CustomerResponse(BaseModel):
    id: str
    name: str
    email: str
    created: bool
    created_at: datetime


class MessageOut(BaseModel):
    role: str
    content: str
    metadata: Optional[Dict[str, Any]] = None
    timestamp: str


class HistoryResponse(BaseModel):
    customer_id: str
    messages: List[MessageOut]


@router.post("/customers", response_model=CustomerResponse)
async def register_customer(
    body: CustomerCreate,
    store: ConversationStore = Depends(get_conversation_store),
):
    """Create a customer, or return the existing one for the same email."""
    customer, created = await store.get_or_create_customer(body.name, body.email)
    if created:
        logger.info(f"Registered customer {customer.id}")

    return CustomerResponse(
        id=customer.id,
        name=customer.name,
        email=customer.email,
        created=created,
        created_at=customer.created_at,
    )


@router.get("/customers/{customer_id}/messages", response_model=HistoryResponse)
async def get_customer_messages(
    customer_id: str,
    limit: int = Query(default=50, ge=1, le=200),
    store: ConversationStore = Depends(get_conversation_store),
):
    customer = await store.get_customer(customer_id)
    if not customer:
        return error_response(status.HTTP_404_NOT_FOUND, CUSTOMER_NOT_FOUND)

    history = await store.get_history(customer_id, limit=limit)
    return HistoryResponse(
        customer_id=customer_id,
        messages=[MessageOut(**m.to_dict()) for m in history],
    )
