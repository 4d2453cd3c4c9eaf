import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from apps.healthchat.config import get_healthchat_settings
from apps.healthchat.exceptions import NotFoundError, ValidationError
from apps.healthchat.models import ChatSession, ChatMessage, ChatLanguage, MessageRole
from apps.healthchat.schemas.chat import ChatSessionCreate, ChatSessionUpdate
from apps.healthchat.store import SessionStore, parse_session_id

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = {language.value for language in ChatLanguage}


class ChatService:
    """Create, read, update and soft-delete chat sessions."""

    def __init__(self, db: AsyncSession):
        self.store = SessionStore(db)
        self.settings = get_healthchat_settings()

    async def create_session(self, session_data: ChatSessionCreate) -> ChatSession:
        """Create a new chat session, optionally seeded with one user message"""
        if not session_data.user_id or not session_data.language:
            raise ValidationError("User ID and language are required")
        if session_data.language not in SUPPORTED_LANGUAGES:
            raise ValidationError(
                f"Unsupported language '{session_data.language}'. "
                f"Expected one of: {sorted(SUPPORTED_LANGUAGES)}"
            )

        session = ChatSession(
            user_id=session_data.user_id,
            language=session_data.language,
            title=self.settings.DEFAULT_TITLE,
        )
        initial = (session_data.initial_message or "").strip()
        if initial:
            session.push_messages(ChatMessage(role=MessageRole.USER, content=initial))

        session = await self.store.insert(session)
        logger.info("Created chat session %s for user %s", session.id, session.user_id)
        return session

    async def list_sessions(self, user_id: str) -> List[ChatSession]:
        """Active sessions for a user, most recently active first"""
        if not user_id:
            raise ValidationError("User ID is required")
        return await self.store.find_by_user(user_id)

    async def get_session(self, session_id: str) -> ChatSession:
        session = await self.store.find_active(parse_session_id(session_id))
        if not session:
            raise NotFoundError("Session not found")
        return session

    async def update_session(self, session_id: str, updates: ChatSessionUpdate) -> ChatSession:
        """Merge the given fields into an active session"""
        session = await self.get_session(session_id)

        update_data = updates.model_dump(exclude_unset=True)
        metadata = update_data.pop("metadata", None) or {}
        for field, value in update_data.items():
            if value is not None:
                setattr(session, field, value)
        for field, value in metadata.items():
            if value is not None:
                setattr(session, field, value)

        session.touch()
        return await self.store.save(session)

    async def delete_session(self, session_id: str) -> None:
        """Soft delete; repeating it on an inactive session is fine"""
        session = await self.store.find_any(parse_session_id(session_id))
        if not session:
            raise NotFoundError("Session not found")

        session.is_active = False
        session.touch()
        await self.store.save(session, action="delete chat session")
        logger.info("Soft-deleted chat session %s", session.id)
