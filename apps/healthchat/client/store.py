"""
Client-side chat state.

``ChatStore`` is an explicit cache of the user's sessions, the open session
and its messages, kept in sync with the API through ``HealthChatClient``.
UI code receives the store object; there is no module-level instance.

Only ``sessions``, ``current_language`` and ``is_sidebar_open`` survive a
reload (see ``persisted_state``). Everything else starts fresh.
"""
import asyncio
import copy
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from apps.healthchat.client.api_client import HealthChatClient, HealthChatClientError
from apps.healthchat.config import get_healthchat_settings

logger = logging.getLogger(__name__)


class MessageStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


@dataclass
class SpeechRecognitionState:
    is_listening: bool = False
    transcript: str = ""
    confidence: float = 0.0
    error: Optional[str] = None


@dataclass
class SpeechSynthesisState:
    is_speaking: bool = False
    is_paused: bool = False
    current_text: Optional[str] = None
    error: Optional[str] = None


class ChatStore:
    PERSISTED_FIELDS = ("sessions", "current_language", "is_sidebar_open")

    def __init__(
        self,
        client: HealthChatClient,
        user_id: Optional[str] = None,
        language: str = "en",
    ):
        self.client = client
        self.user_id = user_id or get_healthchat_settings().DEFAULT_USER_ID
        self._initial_language = language
        self.reset()

    def reset(self):
        self.sessions: List[Dict[str, Any]] = []
        self.current_session: Optional[Dict[str, Any]] = None
        self.messages: List[Dict[str, Any]] = []
        self.is_loading = False
        self.is_generating = False
        self.error: Optional[str] = None
        self.search_query = ""
        self.current_language = self._initial_language
        self.is_sidebar_open = True
        self.background_theme = "default"
        self.speech_recognition = SpeechRecognitionState()
        self.speech_synthesis = SpeechSynthesisState()
        self._send_task: Optional[asyncio.Task] = None
        self._cancel_requested = False

    # Persistence boundary

    def persisted_state(self) -> Dict[str, Any]:
        return {
            "sessions": copy.deepcopy(self.sessions),
            "currentLanguage": self.current_language,
            "isSidebarOpen": self.is_sidebar_open,
        }

    @classmethod
    def from_persisted(
        cls,
        client: HealthChatClient,
        state: Dict[str, Any],
        user_id: Optional[str] = None,
    ) -> "ChatStore":
        store = cls(client, user_id=user_id, language=state.get("currentLanguage", "en"))
        store.sessions = copy.deepcopy(state.get("sessions", []))
        store.is_sidebar_open = state.get("isSidebarOpen", True)
        return store

    # UI helpers

    @property
    def current_session_id(self) -> Optional[str]:
        return self.current_session["id"] if self.current_session else None

    def filtered_sessions(self) -> List[Dict[str, Any]]:
        query = self.search_query.lower()
        return [s for s in self.sessions if query in s.get("title", "").lower()]

    def set_language(self, language: str):
        self.current_language = language

    def toggle_sidebar(self):
        self.is_sidebar_open = not self.is_sidebar_open

    def clear_error(self):
        self.error = None

    # Sessions

    async def load_sessions(self) -> List[Dict[str, Any]]:
        self.is_loading = True
        try:
            self.sessions = await self.client.list_sessions(self.user_id)
        except HealthChatClientError as e:
            self.error = e.message
            logger.warning("Failed to load chat sessions: %s", e.message)
        finally:
            self.is_loading = False
        return self.sessions

    async def create_session(self, initial_message: Optional[str] = None) -> Optional[Dict[str, Any]]:
        try:
            session = await self.client.create_session(
                self.user_id, self.current_language, initial_message=initial_message
            )
        except HealthChatClientError as e:
            self.error = e.message
            logger.warning("Failed to create session: %s", e.message)
            return None

        self.sessions.insert(0, session)
        self._open(session)
        return session

    async def select_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Open a session, refreshing it from the server."""
        try:
            session = await self.client.get_session(session_id)
        except HealthChatClientError as e:
            self.error = e.message
            return None
        self._replace_session(session)
        self._open(session)
        return session

    async def update_session_title(self, session_id: str, title: str) -> Optional[Dict[str, Any]]:
        try:
            session = await self.client.update_session(session_id, {"title": title})
        except HealthChatClientError as e:
            self.error = e.message
            return None
        self._replace_session(session)
        if self.current_session_id == session_id:
            self.current_session = session
        return session

    async def delete_session(self, session_id: str) -> bool:
        try:
            await self.client.delete_session(session_id)
        except HealthChatClientError as e:
            self.error = e.message
            return False

        self.sessions = [s for s in self.sessions if s["id"] != session_id]
        if self.current_session_id == session_id:
            self.current_session = None
            self.messages = []
        return True

    # Messages

    async def send_message(self, text: str, session_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Send ``text`` to a session with an optimistic append.

        The temporary user message carries a correlation id (also sent to
        the server as ``clientMessageId``). On success it is swapped for the
        server's message and the reply is inserted right after it. On a
        client error it is removed. If ``cancel_send`` interrupts the call it
        stays in place marked ``failed``.

        Sending to a session other than the open one skips the optimistic
        message and only updates ``sessions``.

        Returns the server payload, or None when nothing was sent, the call
        failed, or it was cancelled. Only one send may be in flight.
        """
        text = (text or "").strip()
        session_id = session_id or self.current_session_id
        if not text or not session_id or self.is_generating:
            return None

        correlation_id = uuid4().hex
        if session_id == self.current_session_id:
            self.messages.append({
                "id": f"temp-{correlation_id}",
                "role": "user",
                "content": text,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "clientMessageId": correlation_id,
                "status": MessageStatus.PENDING.value,
            })
        self.is_generating = True
        self._cancel_requested = False
        self.error = None

        self._send_task = asyncio.create_task(
            self.client.send_message(session_id, text, self.user_id, client_message_id=correlation_id)
        )
        try:
            data = await self._send_task
        except asyncio.CancelledError:
            if not self._cancel_requested:
                raise
            self._set_status(correlation_id, MessageStatus.FAILED)
            logger.info("Send cancelled for message %s", correlation_id)
            return None
        except HealthChatClientError as e:
            self._remove_message(correlation_id)
            self.error = e.message
            return None
        finally:
            self.is_generating = False
            self._send_task = None

        self._reconcile(session_id, correlation_id, data["userMessage"], data["aiMessage"])
        if self._session_title(session_id) == get_healthchat_settings().DEFAULT_TITLE:
            # The server derives a title from the first message
            await self._refresh_session(session_id)
        return data

    def cancel_send(self) -> bool:
        if self._send_task is None or self._send_task.done():
            return False
        self._cancel_requested = True
        self._send_task.cancel()
        return True

    # Internals

    def _open(self, session: Dict[str, Any]):
        self.current_session = session
        self.messages = [dict(m, status=MessageStatus.SENT.value) for m in session.get("messages", [])]

    def _replace_session(self, session: Dict[str, Any]):
        for index, existing in enumerate(self.sessions):
            if existing["id"] == session["id"]:
                self.sessions[index] = session
                return
        self.sessions.insert(0, session)

    def _session_title(self, session_id: str) -> Optional[str]:
        for session in self.sessions:
            if session["id"] == session_id:
                return session.get("title")
        return None

    async def _refresh_session(self, session_id: str):
        try:
            session = await self.client.get_session(session_id)
        except HealthChatClientError as e:
            logger.warning("Failed to refresh session %s: %s", session_id, e.message)
            return
        self._replace_session(session)
        if self.current_session_id == session_id:
            self.current_session = session

    def _find_message(self, correlation_id: str) -> Optional[int]:
        for index, message in enumerate(self.messages):
            if message.get("clientMessageId") == correlation_id:
                return index
        return None

    def _set_status(self, correlation_id: str, status: MessageStatus):
        index = self._find_message(correlation_id)
        if index is not None:
            self.messages[index]["status"] = status.value

    def _remove_message(self, correlation_id: str):
        index = self._find_message(correlation_id)
        if index is not None:
            del self.messages[index]

    def _reconcile(
        self,
        session_id: str,
        correlation_id: str,
        user_message: Dict[str, Any],
        ai_message: Dict[str, Any],
    ):
        confirmed = [
            dict(user_message, status=MessageStatus.SENT.value),
            dict(ai_message, status=MessageStatus.SENT.value),
        ]
        index = self._find_message(correlation_id)
        if index is not None:
            self.messages[index:index + 1] = confirmed
        elif self.current_session_id == session_id:
            self.messages.extend(confirmed)

        now = datetime.now(timezone.utc).isoformat()
        for position, session in enumerate(self.sessions):
            if session["id"] != session_id:
                continue
            session["messages"] = [*session.get("messages", []), user_message, ai_message]
            session["updatedAt"] = now
            session.setdefault("metadata", {})
            session["metadata"]["totalMessages"] = len(session["messages"])
            session["metadata"]["lastActivity"] = now
            # Most recently active first
            self.sessions.insert(0, self.sessions.pop(position))
            break
