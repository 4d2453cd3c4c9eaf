"""
Test cases for the session store and the session document model
"""
import asyncio
import uuid
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from apps.healthchat.config import get_healthchat_settings
from apps.healthchat.exceptions import StoreError, ValidationError
from apps.healthchat.models import ChatMessage, ChatSession, MessageRole
from apps.healthchat.store import SessionStore, parse_session_id


class TestParseSessionId:

    def test_hex_and_hyphenated_forms_normalize(self):
        value = uuid.uuid4()
        assert parse_session_id(value.hex) == value.hex
        assert parse_session_id(str(value)) == value.hex

    @pytest.mark.parametrize("bad", ["", None, "abc", "507f1f77bcf86cd799439011"])
    def test_rejects_malformed(self, bad):
        with pytest.raises(ValidationError):
            parse_session_id(bad)


class TestChatSessionModel:

    def test_default_title_comes_from_settings(self):
        settings = get_healthchat_settings()
        with patch.object(settings, "DEFAULT_TITLE", "Untitled"):
            assert ChatSession(user_id="u1", language="en").title == "Untitled"
        assert ChatSession(user_id="u1", language="en").title == "New Chat"

    def test_push_messages_keeps_counter_in_sync(self):
        session = ChatSession(user_id="u1", language="en")
        before = session.updated_at

        session.push_messages(
            ChatMessage(role=MessageRole.USER, content="hi"),
            ChatMessage(role=MessageRole.AI, content="hello"),
        )

        assert session.total_messages == len(session.messages) == 2
        assert session.updated_at >= before
        assert session.last_activity == session.updated_at

    def test_has_user_message(self):
        session = ChatSession(user_id="u1", language="en")
        assert not session.has_user_message
        session.push_messages(ChatMessage(role=MessageRole.USER, content="hi"))
        assert session.has_user_message

    def test_find_exchange(self):
        session = ChatSession(user_id="u1", language="en")
        session.push_messages(
            ChatMessage(role=MessageRole.USER, content="hi", client_message_id="c-1"),
            ChatMessage(role=MessageRole.AI, content="hello"),
        )

        user_message, ai_message = session.find_exchange("c-1")
        assert user_message.content == "hi"
        assert ai_message.content == "hello"
        assert session.find_exchange("c-2") is None


class TestSessionStore:

    @pytest.mark.asyncio
    async def test_insert_and_find(self, db_session):
        store = SessionStore(db_session)
        session = await store.insert(ChatSession(user_id="u1", language="hi"))

        found = await store.find_active(session.id)
        assert found.id == session.id
        assert await store.find_active(session.id, user_id="u2") is None

    @pytest.mark.asyncio
    async def test_append_messages_is_one_write(self, db_session):
        store = SessionStore(db_session)
        session = await store.insert(ChatSession(user_id="u1", language="en"))

        await store.append_messages(
            session,
            [
                ChatMessage(role=MessageRole.USER, content="fever"),
                ChatMessage(role=MessageRole.AI, content="rest"),
            ],
            title="Fever Query",
        )

        reloaded = await store.find_active(session.id)
        assert reloaded.title == "Fever Query"
        assert [m.role for m in reloaded.get_messages()] == [MessageRole.USER, MessageRole.AI]
        assert reloaded.total_messages == 2

    @pytest.mark.asyncio
    async def test_failed_append_leaves_no_partial_exchange(self, db_session):
        store = SessionStore(db_session)
        session = await store.insert(ChatSession(user_id="u1", language="en"))
        session_id = session.id

        failure = OperationalError("UPDATE chat_sessions", {}, Exception("disk I/O error"))
        with patch.object(db_session, "commit", side_effect=failure):
            with pytest.raises(StoreError) as excinfo:
                await store.append_messages(
                    session,
                    [
                        ChatMessage(role=MessageRole.USER, content="fever"),
                        ChatMessage(role=MessageRole.AI, content="rest"),
                    ],
                )

        # No driver detail leaks into the message
        assert excinfo.value.message == "Failed to append messages"

        db_session.expire_all()
        reloaded = await store.find_active(session_id)
        assert reloaded.messages == []
        assert reloaded.total_messages == 0

    @pytest.mark.asyncio
    async def test_find_by_user_skips_inactive(self, db_session):
        store = SessionStore(db_session)
        active = await store.insert(ChatSession(user_id="u1", language="en"))
        inactive = await store.insert(ChatSession(user_id="u1", language="en"))
        inactive.is_active = False
        await store.save(inactive)

        sessions = await store.find_by_user("u1")
        assert [s.id for s in sessions] == [active.id]

    @pytest.mark.asyncio
    async def test_connection_timeout_becomes_store_error(self, db_session):
        store = SessionStore(db_session)

        with patch.object(db_session, "execute", side_effect=asyncio.TimeoutError()):
            with pytest.raises(StoreError) as excinfo:
                await store.find_by_user("u1")

        assert excinfo.value.message == "Failed to fetch chat sessions"
