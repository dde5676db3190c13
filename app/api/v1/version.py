"""
Build metadata endpoint
"""
from fastapi import APIRouter
from app.core.config import settings
from app.api.v1.health import SERVICE_NAME

router = APIRouter()


@router.get("/version")
async def get_version():
    """Service name, deployed version (VERSION setting, git SHA or semver) and APP_ENV"""
    return {
        "service": SERVICE_NAME,
        "version": settings.VERSION or "1.0.0",
        "env": settings.APP_ENV,
    }
