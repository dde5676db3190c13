"""
Health check endpoint
"""
from fastapi import APIRouter

router = APIRouter()

SERVICE_NAME = "leave-ledger"


@router.get("/health")
async def health_check():
    """Liveness probe"""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
    }
