"""
Database-backed ConversationStore for the Capital Code assistant.

Implements the ConversationStore protocol using the repository layer.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.repositories import ConversationRepository, CustomerRepository
from llm.conversation_store import CustomerRecord, StoredMessage, normalize_email

logger = logging.getLogger(__name__)


def _to_record(customer) -> CustomerRecord:
    return CustomerRecord(
        id=customer.id,
        name=customer.name,
        email=customer.email,
        created_at=customer.created_at,
    )


class DbConversationStore:
    """Persistent store backed by PostgreSQL or SQLite."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self._customers = CustomerRepository(session)
        self._conversations = ConversationRepository(session)

    async def get_or_create_customer(self, name: str, email: str) -> Tuple[CustomerRecord, bool]:
        """Upsert by unique email."""
        key = normalize_email(email)
        existing = await self._customers.get_by_email(key)
        if existing:
            return _to_record(existing), False

        try:
            async with self._session.begin_nested():
                customer = await self._customers.create(name=name.strip(), email=key)
        except IntegrityError:
            # Lost a race with a concurrent insert for the same email
            existing = await self._customers.get_by_email(key)
            if not existing:
                raise
            return _to_record(existing), False

        logger.info(f"Customer created: {customer.id}")
        return _to_record(customer), True

    async def get_customer(self, customer_id: str) -> Optional[CustomerRecord]:
        customer = await self._customers.get_by_id(customer_id)
        return _to_record(customer) if customer else None

    async def get_customer_by_email(self, email: str) -> Optional[CustomerRecord]:
        customer = await self._customers.get_by_email(normalize_email(email))
        return _to_record(customer) if customer else None

    async def save_message(
        self,
        customer_id: str,
        role: str,
        content: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        await self._conversations.add_message(
            customer_id=customer_id,
            role=role,
            content=content,
            metadata=metadata,
        )

    async def get_history(self, customer_id: str, limit: int = 50) -> List[StoredMessage]:
        rows = await self._conversations.get_messages(customer_id, limit=limit)
        return [
            StoredMessage(
                role=row.role,
                content=row.content,
                metadata=row.message_metadata,
                created_at=row.created_at,
            )
            for row in rows
        ]
