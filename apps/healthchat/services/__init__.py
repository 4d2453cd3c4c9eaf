from .chat_service import ChatService
from .message_service import MessageService

__all__ = ["ChatService", "MessageService"]
