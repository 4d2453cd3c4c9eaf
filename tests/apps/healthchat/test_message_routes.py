"""
Test cases for sending messages
"""
import uuid
from datetime import datetime

import pytest

from apps.healthchat.advice import RESPONSES

BASE = "/api/v1/healthchat"


async def create_session(client, user_id="u1", language="en", **extra):
    payload = {"userId": user_id, "language": language, **extra}
    response = await client.post(f"{BASE}/sessions", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["session"]


async def send(client, session_id, message, user_id="u1", **extra):
    payload = {"sessionId": session_id, "message": message, "userId": user_id, **extra}
    return await client.post(f"{BASE}/messages", json=payload)


async def fetch(client, session_id):
    response = await client.get(f"{BASE}/sessions/{session_id}")
    assert response.status_code == 200
    return response.json()["session"]


class TestSendMessage:

    @pytest.mark.asyncio
    async def test_fever_exchange_end_to_end(self, client):
        """First fever message gets the English advice and renames the session"""
        session = await create_session(client)

        response = await send(client, session["id"], "I have a fever")
        assert response.status_code == 200
        data = response.json()

        assert data["success"] is True
        assert data["userMessage"]["role"] == "user"
        assert data["userMessage"]["content"] == "I have a fever"
        assert data["aiMessage"]["role"] == "ai"
        assert data["aiMessage"]["content"] == RESPONSES["en"]["fever"]
        assert data["aiMessage"]["metadata"] == {
            "model": "arogya-ai-v1",
            "confidence": 0.95,
        }
        # Metadata is only attached to the reply
        assert "metadata" not in data["userMessage"]

        stored = await fetch(client, session["id"])
        assert stored["title"] == "Fever Query"
        assert stored["metadata"]["lastActivity"] == stored["updatedAt"]
        assert datetime.fromisoformat(stored["updatedAt"]) > datetime.fromisoformat(session["updatedAt"])

    @pytest.mark.asyncio
    async def test_each_exchange_appends_two_messages_in_order(self, client):
        session = await create_session(client, language="hi")

        await send(client, session["id"], "नमस्ते")
        await send(client, session["id"], "मुझे खांसी है")

        stored = await fetch(client, session["id"])
        assert stored["metadata"]["totalMessages"] == 4
        assert [m["role"] for m in stored["messages"]] == ["user", "ai", "user", "ai"]
        assert stored["messages"][3]["content"] == RESPONSES["hi"]["cough"]
        assert len({m["id"] for m in stored["messages"]}) == 4

    @pytest.mark.asyncio
    async def test_content_is_trimmed(self, client):
        session = await create_session(client)

        response = await send(client, session["id"], "   headache again   ")
        assert response.json()["userMessage"]["content"] == "headache again"

    @pytest.mark.asyncio
    async def test_title_falls_back_to_first_words(self, client):
        session = await create_session(client)

        await send(client, session["id"], "Let's talk about diet")

        stored = await fetch(client, session["id"])
        assert stored["title"] == "Let's talk about"

    @pytest.mark.asyncio
    async def test_title_only_derived_once(self, client):
        session = await create_session(client)

        await send(client, session["id"], "I have a cough")
        await send(client, session["id"], "Now I also have a fever")

        stored = await fetch(client, session["id"])
        assert stored["title"] == "Cough Treatment"

    @pytest.mark.asyncio
    async def test_custom_title_is_not_overwritten(self, client):
        session = await create_session(client)
        await client.patch(f"{BASE}/sessions/{session['id']}", json={"title": "Mine"})

        await send(client, session["id"], "fever")

        stored = await fetch(client, session["id"])
        assert stored["title"] == "Mine"

    @pytest.mark.asyncio
    async def test_initial_message_blocks_title_derivation(self, client):
        session = await create_session(client, initialMessage="Hi")

        await send(client, session["id"], "I have a fever")

        stored = await fetch(client, session["id"])
        assert stored["title"] == "New Chat"
        assert stored["metadata"]["totalMessages"] == 3

    @pytest.mark.asyncio
    async def test_other_users_session_is_not_found(self, client):
        """Ownership is checked; nothing is appended"""
        session = await create_session(client, user_id="u1")

        response = await send(client, session["id"], "I have a fever", user_id="u2")
        assert response.status_code == 404
        assert response.json() == {"error": "Session not found"}

        stored = await fetch(client, session["id"])
        assert stored["messages"] == []
        assert stored["metadata"]["totalMessages"] == 0

    @pytest.mark.asyncio
    async def test_deleted_session_is_not_found(self, client):
        session = await create_session(client)
        await client.delete(f"{BASE}/sessions/{session['id']}")

        response = await send(client, session["id"], "hello")
        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"message": "hi", "userId": "u1"},
        {"sessionId": "SESSION", "userId": "u1"},
        {"sessionId": "SESSION", "message": "hi"},
        {"sessionId": "SESSION", "message": "   ", "userId": "u1"},
    ])
    async def test_missing_fields(self, client, payload):
        session = await create_session(client)
        if payload.get("sessionId") == "SESSION":
            payload = {**payload, "sessionId": session["id"]}

        response = await client.post(f"{BASE}/messages", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": "Session ID, message, and user ID are required"}

    @pytest.mark.asyncio
    async def test_malformed_session_id(self, client):
        response = await send(client, "definitely-not-a-uuid", "hello")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid session ID"}

    @pytest.mark.asyncio
    async def test_unknown_session(self, client):
        response = await send(client, uuid.uuid4().hex, "hello")
        assert response.status_code == 404


class TestReplayedMessages:

    @pytest.mark.asyncio
    async def test_same_client_message_id_returns_stored_exchange(self, client):
        session = await create_session(client)

        first = await send(client, session["id"], "fever", clientMessageId="c-1")
        second = await send(client, session["id"], "fever", clientMessageId="c-1")

        assert first.status_code == second.status_code == 200
        assert first.json()["userMessage"]["id"] == second.json()["userMessage"]["id"]
        assert first.json()["aiMessage"]["id"] == second.json()["aiMessage"]["id"]
        assert first.json()["userMessage"]["clientMessageId"] == "c-1"

        stored = await fetch(client, session["id"])
        assert stored["metadata"]["totalMessages"] == 2

    @pytest.mark.asyncio
    async def test_without_client_message_id_duplicates_are_appended(self, client):
        session = await create_session(client)

        await send(client, session["id"], "fever")
        await send(client, session["id"], "fever")

        stored = await fetch(client, session["id"])
        assert stored["metadata"]["totalMessages"] == 4
