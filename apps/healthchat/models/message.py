from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4
from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_message_id() -> str:
    return uuid4().hex


class MessageRole(str, Enum):
    USER = "user"
    AI = "ai"


class ChatLanguage(str, Enum):
    EN = "en"
    HI = "hi"
    OD = "od"


class MessageMetadata(BaseModel):
    model: Optional[str] = None
    confidence: Optional[float] = None
    tokens: Optional[int] = None


# Only used in JSON storage, embedded in ChatSession.messages
class ChatMessage(BaseModel):
    id: str = Field(default_factory=new_message_id)
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=utcnow)
    client_message_id: Optional[str] = None
    metadata: Optional[MessageMetadata] = None

    model_config = {
        "from_attributes": True
    }

    def to_document(self) -> dict:
        """Serialize for the JSON column; None fields are dropped."""
        return self.model_dump(mode="json", exclude_none=True)
