from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List

class HealthchatSettings(BaseSettings):
    DATABASE_URL: str
    DB_ECHO: bool = False

    # Chat behaviour
    DEFAULT_TITLE: str = "New Chat"
    AI_MODEL_NAME: str = "arogya-ai-v1"
    AI_CONFIDENCE: float = 0.95

    # Client settings (no auth yet, the UI uses a fixed user id)
    DEFAULT_USER_ID: str = "user_123"
    API_BASE_URL: str = "http://localhost:8000/api/v1/healthchat"
    CLIENT_TIMEOUT: float = 30.0

    LOG_LEVEL: str = "INFO"

    # CORS settings
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:3001",
        "https://arogyaai.com"
    ]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
    CORS_ALLOW_HEADERS: List[str] = [
        "X-Requested-With",
        "Content-Type",
        "Accept",
        "Origin",
        "Cache-Control"
    ]

    class Config:
        env_prefix = "HEALTHCHAT_"
        env_file = ".env"  # you can use a different file if you want
        extra = "ignore"  # Ignore extra fields from .env

@lru_cache()
def get_healthchat_settings():
    return HealthchatSettings()
