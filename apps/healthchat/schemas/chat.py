from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, model_serializer
from pydantic.alias_generators import to_camel

from apps.healthchat.models import ChatSession, ChatMessage, MessageRole


class CamelModel(BaseModel):
    """JSON bodies use camelCase keys; Python code uses snake_case."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Requests. Required fields are Optional here so the service can answer
# missing values with a 400 and a readable message.

class ChatSessionCreate(CamelModel):
    user_id: Optional[str] = None
    language: Optional[str] = None
    initial_message: Optional[str] = None


class SessionMetadataUpdate(CamelModel):
    category: Optional[str] = None
    tags: Optional[List[str]] = None


class ChatSessionUpdate(CamelModel):
    title: Optional[str] = None
    language: Optional[str] = None
    metadata: Optional[SessionMetadataUpdate] = None


class SendMessageRequest(CamelModel):
    session_id: Optional[str] = None
    message: Optional[str] = None
    user_id: Optional[str] = None
    client_message_id: Optional[str] = None


# Responses

class MessageMetadataResponse(CamelModel):
    model: str
    confidence: float


class MessageResponse(CamelModel):
    id: str
    role: MessageRole
    content: str
    timestamp: datetime
    client_message_id: Optional[str] = None
    metadata: Optional[MessageMetadataResponse] = None

    @model_serializer(mode="wrap")
    def _omit_unset_fields(self, handler):
        # Absent optional fields are omitted rather than sent as null
        return {key: value for key, value in handler(self).items() if value is not None}

    @classmethod
    def from_message(cls, message: ChatMessage) -> "MessageResponse":
        return cls.model_validate(message.model_dump())


class SessionMetadataResponse(CamelModel):
    total_messages: int
    last_activity: datetime
    category: Optional[str] = None
    tags: List[str] = []


class ChatSessionResponse(CamelModel):
    id: str
    user_id: str
    title: str
    language: str
    messages: List[MessageResponse]
    created_at: datetime
    updated_at: datetime
    is_active: bool
    metadata: SessionMetadataResponse

    @classmethod
    def from_model(cls, session: ChatSession) -> "ChatSessionResponse":
        return cls(
            id=session.id,
            user_id=session.user_id,
            title=session.title,
            language=session.language,
            messages=[MessageResponse.from_message(m) for m in session.get_messages()],
            created_at=session.created_at,
            updated_at=session.updated_at,
            is_active=session.is_active,
            metadata=SessionMetadataResponse(
                total_messages=session.total_messages,
                last_activity=session.last_activity,
                category=session.category,
                tags=session.tags or [],
            ),
        )


class SessionEnvelope(CamelModel):
    session: ChatSessionResponse


class SessionListResponse(CamelModel):
    sessions: List[ChatSessionResponse]


class DeleteResponse(CamelModel):
    success: bool = True


class SendMessageResponse(CamelModel):
    user_message: MessageResponse
    ai_message: MessageResponse
    success: bool = True
