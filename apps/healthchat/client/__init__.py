from .api_client import HealthChatClient, HealthChatClientError
from .store import ChatStore, MessageStatus

__all__ = ["HealthChatClient", "HealthChatClientError", "ChatStore", "MessageStatus"]
