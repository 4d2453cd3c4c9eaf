# api/v1/router.py
from fastapi import APIRouter
from api.v1.healthchat import router as healthchat_router

router = APIRouter()

# Mount domain-based routers
router.include_router(healthchat_router, prefix="/healthchat")
