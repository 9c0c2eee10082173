"""API routes for TVGate"""

from fastapi import APIRouter

from .channels import router as channels_router
from .health import router as health_router
from .remote import router as remote_router
from .settings import router as settings_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router)
api_router.include_router(remote_router)
api_router.include_router(settings_router)
api_router.include_router(channels_router)

__all__ = ["api_router"]
