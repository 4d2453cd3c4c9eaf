# api/router.py
from fastapi import APIRouter
from api.v1.router import router as v1_router
from apps.healthchat.routes import health

router = APIRouter()

# Service health lives outside the versioned prefix
router.include_router(health.router, prefix="", tags=["Health"])

# Mount v1 APIs
router.include_router(v1_router, prefix="/api/v1")
