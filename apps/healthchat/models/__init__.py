# Import all models so SQLAlchemy can discover them
from .chat_session import ChatSession
from .message import ChatMessage, ChatLanguage, MessageMetadata, MessageRole

__all__ = [
    "ChatSession",
    "ChatMessage",
    "ChatLanguage",
    "MessageMetadata",
    "MessageRole",
]
