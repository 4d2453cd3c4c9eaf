import logging
from typing import Any, Dict, List, Optional

import httpx

from apps.healthchat.config import get_healthchat_settings

logger = logging.getLogger(__name__)


class HealthChatClientError(Exception):
    """Network failure, timeout, or a non-2xx answer from the API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class HealthChatClient:
    """Thin async wrapper around the healthchat HTTP API.

    Every method returns the decoded JSON body or raises
    ``HealthChatClientError``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_healthchat_settings()
        self.base_url = base_url or settings.API_BASE_URL
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.CLIENT_TIMEOUT,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, endpoint, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"API Error [{method} {endpoint}]: {e}")
            raise HealthChatClientError(f"Network error: {type(e).__name__}") from e

        if response.is_success:
            return response.json()

        try:
            message = response.json().get("error") or response.reason_phrase
        except ValueError:
            message = response.reason_phrase or "An unexpected error occurred"
        logger.warning(f"API Error [{method} {endpoint}]: {response.status_code} {message}")
        raise HealthChatClientError(message, status_code=response.status_code)

    # Sessions

    async def list_sessions(self, user_id: str) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/sessions", params={"userId": user_id})
        return data["sessions"]

    async def create_session(
        self,
        user_id: str,
        language: str,
        initial_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {"userId": user_id, "language": language}
        if initial_message:
            payload["initialMessage"] = initial_message
        data = await self._request("POST", "/sessions", json=payload)
        return data["session"]

    async def get_session(self, session_id: str) -> Dict[str, Any]:
        data = await self._request("GET", f"/sessions/{session_id}")
        return data["session"]

    async def update_session(self, session_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request("PATCH", f"/sessions/{session_id}", json=updates)
        return data["session"]

    async def delete_session(self, session_id: str) -> bool:
        data = await self._request("DELETE", f"/sessions/{session_id}")
        return bool(data.get("success"))

    # Messages

    async def send_message(
        self,
        session_id: str,
        message: str,
        user_id: str,
        client_message_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {
            "sessionId": session_id,
            "message": message.strip(),
            "userId": user_id,
        }
        if client_message_id:
            payload["clientMessageId"] = client_message_id
        return await self._request("POST", "/messages", json=payload)
