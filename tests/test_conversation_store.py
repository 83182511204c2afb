"""Tests for customer and conversation storage."""

import asyncio

import pytest

from database import session as db_session
from database.repositories import CustomerRepository
from llm.conversation_store import ConversationStore, InMemoryConversationStore
from llm.db_conversation_store import DbConversationStore


def run(coro):
    return asyncio.run(coro)


# ── In-memory store ───────────────────────────────────

class TestInMemoryStore:
    def test_satisfies_protocol(self):
        assert isinstance(InMemoryConversationStore(), ConversationStore)

    def test_customer_upsert_by_email(self):
        store = InMemoryConversationStore()

        async def scenario():
            first, created = await store.get_or_create_customer("Ana", "Ana@Example.com ")
            again, created_again = await store.get_or_create_customer("Ana María", "ana@example.com")
            return first, created, again, created_again

        first, created, again, created_again = run(scenario())
        assert created and not created_again
        assert first.id == again.id
        assert first.email == "ana@example.com"
        assert again.name == "Ana"

    def test_history_keeps_order_and_limit(self):
        store = InMemoryConversationStore()

        async def scenario():
            customer, _ = await store.get_or_create_customer("Luis", "luis@example.com")
            for i in range(5):
                await store.save_message(customer.id, "user", f"mensaje {i}")
            return await store.get_history(customer.id, limit=3)

        history = run(scenario())
        assert [m.content for m in history] == ["mensaje 2", "mensaje 3", "mensaje 4"]

    def test_history_is_bounded(self):
        store = InMemoryConversationStore(max_messages_per_customer=2)

        async def scenario():
            customer, _ = await store.get_or_create_customer("Luis", "luis@example.com")
            for i in range(4):
                await store.save_message(customer.id, "user", f"mensaje {i}")
            return await store.get_history(customer.id)

        assert [m.content for m in run(scenario())] == ["mensaje 2", "mensaje 3"]

    def test_unknown_customer(self):
        store = InMemoryConversationStore()
        assert run(store.get_customer("missing")) is None
        with pytest.raises(KeyError):
            run(store.save_message("missing", "user", "hola"))

    def test_message_dict_has_timestamp(self):
        store = InMemoryConversationStore()

        async def scenario():
            customer, _ = await store.get_or_create_customer("Eva", "eva@example.com")
            await store.save_message(customer.id, "assistant", "Hola", metadata={"model": "m"})
            return await store.get_history(customer.id)

        data = run(scenario())[0].to_dict()
        assert data["role"] == "assistant"
        assert data["metadata"] == {"model": "m"}
        assert "timestamp" in data


# ── Database store ────────────────────────────────────

class TestDbStore:
    def test_round_trip_on_sqlite(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'chat.db'}"

        async def scenario():
            await db_session.init_db(url)
            try:
                async with db_session.session_scope() as session:
                    store = DbConversationStore(session)
                    customer, created = await store.get_or_create_customer("Ana", "ANA@example.com")
                    await store.save_message(customer.id, "user", "¿Qué servicios ofrecen?")
                    await store.save_message(
                        customer.id, "assistant", "Desarrollo web y móvil.", metadata={"intent": "services"}
                    )

                async with db_session.session_scope() as session:
                    store = DbConversationStore(session)
                    again, created_again = await store.get_or_create_customer("Otra", "ana@example.com")
                    by_email = await store.get_customer_by_email("Ana@Example.com")
                    history = await store.get_history(customer.id)
                    last = await store.get_history(customer.id, limit=1)
                    total = await CustomerRepository(session).count()
            finally:
                await db_session.close_db()
            return customer, created, again, created_again, by_email, history, last, total

        customer, created, again, created_again, by_email, history, last, total = run(scenario())

        assert created and not created_again
        assert again.id == customer.id == by_email.id
        assert total == 1
        assert [m.role for m in history] == ["user", "assistant"]
        assert history[1].metadata == {"intent": "services"}
        assert [m.content for m in last] == ["Desarrollo web y móvil."]
        assert not db_session.is_initialized()

    def test_unknown_customer_is_none(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'chat.db'}"

        async def scenario():
            await db_session.init_db(url)
            try:
                async with db_session.session_scope() as session:
                    return await DbConversationStore(session).get_customer("missing")
            finally:
                await db_session.close_db()

        assert run(scenario()) is None
