from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.healthchat.db import get_healthchat_session
from apps.healthchat.schemas.chat import (
    ChatSessionCreate, ChatSessionUpdate, ChatSessionResponse,
    SessionEnvelope, SessionListResponse, DeleteResponse
)
from apps.healthchat.services.chat_service import ChatService

router = APIRouter(prefix="/sessions")


async def get_chat_service(session: AsyncSession = Depends(get_healthchat_session)) -> ChatService:
    """Dependency to get chat service"""
    return ChatService(session)


@router.get("", response_model=SessionListResponse)
async def list_chat_sessions(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    chat_service: ChatService = Depends(get_chat_service)
):
    """List active chat sessions for a user, most recent first"""
    sessions = await chat_service.list_sessions(user_id)
    return SessionListResponse(sessions=[ChatSessionResponse.from_model(s) for s in sessions])


@router.post("", response_model=SessionEnvelope, status_code=status.HTTP_201_CREATED)
async def create_chat_session(
    session_data: ChatSessionCreate,
    chat_service: ChatService = Depends(get_chat_service)
):
    """
    Create a new chat session

    - **userId**: owner of the session
    - **language**: one of en, hi, od
    - **initialMessage**: optional first user message (no reply is generated)
    """
    session = await chat_service.create_session(session_data)
    return SessionEnvelope(session=ChatSessionResponse.from_model(session))


@router.get("/{session_id}", response_model=SessionEnvelope)
async def get_chat_session(
    session_id: str,
    chat_service: ChatService = Depends(get_chat_service)
):
    """Get a specific active chat session"""
    session = await chat_service.get_session(session_id)
    return SessionEnvelope(session=ChatSessionResponse.from_model(session))


@router.patch("/{session_id}", response_model=SessionEnvelope)
async def update_chat_session(
    session_id: str,
    updates: ChatSessionUpdate,
    chat_service: ChatService = Depends(get_chat_service)
):
    """Update title, language or metadata of an active chat session"""
    session = await chat_service.update_session(session_id, updates)
    return SessionEnvelope(session=ChatSessionResponse.from_model(session))


@router.delete("/{session_id}", response_model=DeleteResponse)
async def delete_chat_session(
    session_id: str,
    chat_service: ChatService = Depends(get_chat_service)
):
    """Soft delete a chat session"""
    await chat_service.delete_session(session_id)
    return DeleteResponse(success=True)
