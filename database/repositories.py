"""
Repository classes for the Capital Code assistant data access layer.

Each repository encapsulates CRUD operations for a specific model.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Customer, ConversationMessageRow

logger = logging.getLogger(__name__)


class CustomerRepository:
    """Data access for customers."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, name: str, email: str) -> Customer:
        customer = Customer(name=name, email=email)
        self.session.add(customer)
        await self.session.flush()
        return customer

    async def get_by_id(self, customer_id: str) -> Optional[Customer]:
        result = await self.session.execute(
            select(Customer).where(Customer.id == customer_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[Customer]:
        result = await self.session.execute(
            select(Customer).where(Customer.email == email)
        )
        return result.scalar_one_or_none()

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(Customer.id)))
        return result.scalar() or 0


class ConversationRepository:
    """Data access for conversation turns."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_message(
        self,
        customer_id: str,
        role: str,
        content: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ConversationMessageRow:
        msg = ConversationMessageRow(
            customer_id=customer_id,
            role=role,
            content=content,
            message_metadata=metadata,
        )
        self.session.add(msg)
        await self.session.flush()
        return msg

    async def get_messages(
        self, customer_id: str, limit: int = 50
    ) -> List[ConversationMessageRow]:
        """Most recent `limit` turns, oldest first."""
        result = await self.session.execute(
            select(ConversationMessageRow)
            .where(ConversationMessageRow.customer_id == customer_id)
            .order_by(ConversationMessageRow.created_at.desc())
            .limit(limit)
        )
        return list(reversed(result.scalars().all()))
