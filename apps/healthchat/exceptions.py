"""Errors raised by the healthchat services.

Routes don't catch these; ``main.py`` registers handlers that turn each one
into a ``{"error": ...}`` response with ``status_code``.
"""
from fastapi import status


class HealthChatError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(HealthChatError):
    """A required field is missing or malformed."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(HealthChatError):
    """Session is missing, inactive, or owned by another user."""
    status_code = status.HTTP_404_NOT_FOUND


class StoreError(HealthChatError):
    """The database failed. The message is always generic."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
