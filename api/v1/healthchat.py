from fastapi import APIRouter
from apps.healthchat.routes import sessions, messages

router = APIRouter()

# Include session lifecycle routes
router.include_router(sessions.router, prefix="", tags=["Chat Sessions"])

# Include message routes
router.include_router(messages.router, prefix="", tags=["Chat Messages"])
