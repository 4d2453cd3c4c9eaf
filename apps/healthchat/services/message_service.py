import logging
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from apps.healthchat.advice import classify_and_reply
from apps.healthchat.config import get_healthchat_settings
from apps.healthchat.exceptions import NotFoundError, ValidationError
from apps.healthchat.models import ChatMessage, MessageMetadata, MessageRole
from apps.healthchat.schemas.chat import SendMessageRequest
from apps.healthchat.store import SessionStore, parse_session_id

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, db: AsyncSession):
        self.store = SessionStore(db)
        self.settings = get_healthchat_settings()

    async def send_message(self, request: SendMessageRequest) -> Tuple[ChatMessage, ChatMessage]:
        """
        Append a user message and its canned reply to a session.

        The session must be active and owned by ``request.user_id``. Both
        messages, the counters and (for the first user message of a session
        still called "New Chat") the derived title are written in a single
        commit.

        When ``client_message_id`` matches a user message already stored in
        the session, the stored exchange is returned and nothing is written.

        Returns:
            (user_message, ai_message)
        """
        text = (request.message or "").strip()
        if not request.session_id or not text or not request.user_id:
            raise ValidationError("Session ID, message, and user ID are required")
        session_id = parse_session_id(request.session_id)

        session = await self.store.find_active(session_id, user_id=request.user_id)
        if not session:
            raise NotFoundError("Session not found")

        if request.client_message_id:
            previous = session.find_exchange(request.client_message_id)
            if previous and previous[1] is not None:
                logger.info(
                    "Replayed message %s in session %s", request.client_message_id, session.id
                )
                return previous

        user_message = ChatMessage(
            role=MessageRole.USER,
            content=text,
            client_message_id=request.client_message_id,
        )

        classification = classify_and_reply(text, session.language)
        ai_message = ChatMessage(
            role=MessageRole.AI,
            content=classification.reply,
            metadata=MessageMetadata(
                model=self.settings.AI_MODEL_NAME,
                confidence=self.settings.AI_CONFIDENCE,
            ),
        )

        title = None
        if not session.has_user_message and session.title == self.settings.DEFAULT_TITLE:
            title = classification.suggested_title

        await self.store.append_messages(session, [user_message, ai_message], title=title)
        logger.info(
            "Session %s: answered message (topic=%s, total=%d)",
            session.id, classification.topic or "default", session.total_messages
        )
        return user_message, ai_message
