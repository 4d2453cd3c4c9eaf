from datetime import datetime
from typing import Optional, List
from uuid import uuid4
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, DateTime
import sqlalchemy.dialects.postgresql as pg

from apps.healthchat.config import get_healthchat_settings
from apps.healthchat.models.message import ChatMessage, MessageRole, utcnow

# JSONB on PostgreSQL, plain JSON elsewhere (sqlite in tests)
DocumentJSON = JSON().with_variant(pg.JSONB(), "postgresql")


class ChatSession(SQLModel, table=True):
    __tablename__ = "chat_sessions"

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    user_id: str = Field(max_length=255, index=True)
    title: str = Field(
        default_factory=lambda: get_healthchat_settings().DEFAULT_TITLE,
        max_length=255
    )
    language: str = Field(max_length=8)

    # Embedded message documents, chronological
    messages: List[dict] = Field(
        default_factory=list,
        sa_column=Column(DocumentJSON, nullable=False, default=list)
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    is_active: bool = Field(default=True)

    # metadata.*
    total_messages: int = Field(default=0)
    last_activity: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    category: Optional[str] = Field(default=None, max_length=100)
    tags: List[str] = Field(
        default_factory=list,
        sa_column=Column(DocumentJSON, nullable=False, default=list)
    )

    def __repr__(self):
        return f"<ChatSession {self.id} ({self.language}, {self.total_messages} messages)>"

    def touch(self, when: Optional[datetime] = None) -> None:
        """Bump updated_at and mirror it into last_activity."""
        when = when or utcnow()
        self.updated_at = when
        self.last_activity = when

    def push_messages(self, *new_messages: ChatMessage) -> None:
        """Append messages and keep total_messages in sync.

        The list is reassigned rather than mutated so SQLAlchemy sees the
        JSON column as dirty.
        """
        self.messages = [*self.messages, *(m.to_document() for m in new_messages)]
        self.total_messages = len(self.messages)
        self.touch()

    def get_messages(self) -> List[ChatMessage]:
        return [ChatMessage.model_validate(doc) for doc in self.messages]

    @property
    def has_user_message(self) -> bool:
        return any(doc.get("role") == MessageRole.USER.value for doc in self.messages)

    def find_exchange(self, client_message_id: str) -> Optional[tuple]:
        """Return the (user, ai) pair previously stored for a correlation id."""
        for index, doc in enumerate(self.messages):
            if doc.get("client_message_id") != client_message_id:
                continue
            if doc.get("role") != MessageRole.USER.value:
                continue
            user_message = ChatMessage.model_validate(doc)
            ai_message = None
            if index + 1 < len(self.messages):
                candidate = ChatMessage.model_validate(self.messages[index + 1])
                if candidate.role == MessageRole.AI:
                    ai_message = candidate
            return user_message, ai_message
        return None
