"""
Main API router
"""
from fastapi import APIRouter

from app.api.v1 import (
    health,
    version,
    leave_types,
    leave_groups,
    employees,
    holidays,
    leaves,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(leave_types.router, prefix="/leave-types", tags=["leave-types"])
api_router.include_router(leave_groups.router, prefix="/leave-groups", tags=["leave-groups"])
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(holidays.router, prefix="/holidays", tags=["holidays"])
api_router.include_router(leaves.router, prefix="/leaves", tags=["leaves"])
