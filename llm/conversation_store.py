"""
ConversationStore protocol for the Capital Code assistant.

Abstracts customer and conversation storage so the API can work with
either in-memory dicts or a database backend.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable


@dataclass
class CustomerRecord:
    """A widget visitor identified by email."""
    id: str
    name: str
    email: str
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class StoredMessage:
    """One persisted conversation turn."""
    role: str
    content: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
            "metadata": self.metadata,
            "timestamp": self.created_at.isoformat(),
        }


def normalize_email(email: str) -> str:
    return email.strip().lower()


@runtime_checkable
class ConversationStore(Protocol):
    """Protocol for customer and conversation persistence."""

    async def get_or_create_customer(self, name: str, email: str) -> Tuple[CustomerRecord, bool]:
        """Look up a customer by email, creating it if missing. Returns (customer, created)."""
        ...

    async def get_customer(self, customer_id: str) -> Optional[CustomerRecord]:
        """Get a customer by id."""
        ...

    async def get_customer_by_email(self, email: str) -> Optional[CustomerRecord]:
        """Get a customer by email."""
        ...

    async def save_message(
        self,
        customer_id: str,
        role: str,
        content: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append a turn to the customer's conversation."""
        ...

    async def get_history(self, customer_id: str, limit: int = 50) -> List[StoredMessage]:
        """Get the customer's conversation, oldest first."""
        ...


class InMemoryConversationStore:
    """Process-local store used when no database is configured."""

    def __init__(self, max_messages_per_customer: int = 200):
        self.max_messages_per_customer = max_messages_per_customer
        self._customers: Dict[str, CustomerRecord] = {}
        self._by_email: Dict[str, str] = {}
        self._messages: Dict[str, List[StoredMessage]] = {}
        self._lock = asyncio.Lock()

    async def get_or_create_customer(self, name: str, email: str) -> Tuple[CustomerRecord, bool]:
        key = normalize_email(email)
        async with self._lock:
            existing_id = self._by_email.get(key)
            if existing_id:
                return self._customers[existing_id], False

            customer = CustomerRecord(id=str(uuid.uuid4()), name=name.strip(), email=key)
            self._customers[customer.id] = customer
            self._by_email[key] = customer.id
            self._messages[customer.id] = []
            return customer, True

    async def get_customer(self, customer_id: str) -> Optional[CustomerRecord]:
        return self._customers.get(customer_id)

    async def get_customer_by_email(self, email: str) -> Optional[CustomerRecord]:
        customer_id = self._by_email.get(normalize_email(email))
        return self._customers.get(customer_id) if customer_id else None

    async def save_message(
        self,
        customer_id: str,
        role: str,
        content: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        if customer_id not in self._customers:
            raise KeyError(f"Unknown customer: {customer_id}")
        async with self._lock:
            messages = self._messages.setdefault(customer_id, [])
            messages.append(StoredMessage(role=role, content=content, metadata=metadata))
            # Keep only the most recent turns
            if len(messages) > self.max_messages_per_customer:
                del messages[: len(messages) - self.max_messages_per_customer]

    async def get_history(self, customer_id: str, limit: int = 50) -> List[StoredMessage]:
        return list(self._messages.get(customer_id, [])[-limit:])
