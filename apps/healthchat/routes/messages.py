from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from apps.healthchat.db import get_healthchat_session
from apps.healthchat.schemas.chat import SendMessageRequest, SendMessageResponse, MessageResponse
from apps.healthchat.services.message_service import MessageService

router = APIRouter(prefix="/messages")


async def get_message_service(session: AsyncSession = Depends(get_healthchat_session)) -> MessageService:
    """Dependency to get message service"""
    return MessageService(session)


@router.post("", response_model=SendMessageResponse)
async def send_message(
    request: SendMessageRequest,
    message_service: MessageService = Depends(get_message_service)
):
    """Send a message and get the assistant's reply"""
    user_message, ai_message = await message_service.send_message(request)
    return SendMessageResponse(
        user_message=MessageResponse.from_message(user_message),
        ai_message=MessageResponse.from_message(ai_message),
    )
