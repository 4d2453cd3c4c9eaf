"""
Session store: the ``chat_sessions`` collection.

Each session row is a document with its messages embedded in a JSON column.
All queries and writes go through this class so that a failure of the
database, including a refused or dropped connection, is logged once, rolled
back, and surfaced as a ``StoreError`` with no internal detail.
"""
import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from apps.healthchat.exceptions import StoreError, ValidationError
from apps.healthchat.models import ChatSession, ChatMessage

logger = logging.getLogger(__name__)


def parse_session_id(session_id: Optional[str]) -> str:
    """Normalize a session id to the stored hex form or raise ValidationError."""
    if not session_id:
        raise ValidationError("Session ID is required")
    try:
        return uuid.UUID(str(session_id)).hex
    except ValueError:
        raise ValidationError("Invalid session ID")


class SessionStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _guard(self, action: str):
        try:
            yield
        except (SQLAlchemyError, OSError, asyncio.TimeoutError):
            # Driver-level connection failures surface as OSError
            logger.exception("Database error while trying to %s", action)
            try:
                await self.db.rollback()
            except (SQLAlchemyError, OSError):
                logger.warning("Rollback failed after database error (%s)", action)
            raise StoreError(f"Failed to {action}")

    async def insert(self, session: ChatSession) -> ChatSession:
        async with self._guard("create chat session"):
            self.db.add(session)
            await self.db.commit()
            await self.db.refresh(session)
        return session

    async def find_active(self, session_id: str, user_id: Optional[str] = None) -> Optional[ChatSession]:
        """Active session by id, optionally restricted to its owner."""
        query = select(ChatSession).where(
            ChatSession.id == session_id,
            ChatSession.is_active == True,
        )
        if user_id is not None:
            query = query.where(ChatSession.user_id == user_id)
        async with self._guard("fetch chat session"):
            result = await self.db.execute(query)
            return result.scalar_one_or_none()

    async def find_any(self, session_id: str) -> Optional[ChatSession]:
        async with self._guard("fetch chat session"):
            result = await self.db.execute(
                select(ChatSession).where(ChatSession.id == session_id)
            )
            return result.scalar_one_or_none()

    async def find_by_user(self, user_id: str) -> List[ChatSession]:
        query = (
            select(ChatSession)
            .where(ChatSession.user_id == user_id, ChatSession.is_active == True)
            .order_by(ChatSession.updated_at.desc())
        )
        async with self._guard("fetch chat sessions"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def save(self, session: ChatSession, action: str = "update chat session") -> ChatSession:
        """Commit pending changes on ``session`` and reload it."""
        async with self._guard(action):
            self.db.add(session)
            await self.db.commit()
            await self.db.refresh(session)
        return session

    async def append_messages(
        self,
        session: ChatSession,
        messages: List[ChatMessage],
        title: Optional[str] = None,
    ) -> ChatSession:
        """Append a batch of messages (and optionally a new title) in one commit.

        Either every message lands or none does.
        """
        session.push_messages(*messages)
        if title is not None:
            session.title = title
        return await self.save(session, action="append messages")
