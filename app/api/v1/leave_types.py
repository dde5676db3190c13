"""
Leave type catalog endpoints
"""
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_actor_id
from app.schemas.policy import LeaveTypeCreate, LeaveTypeOut
from app.services.leave_group_service import create_leave_type, list_leave_types

router = APIRouter()


@router.post("", response_model=LeaveTypeOut, status_code=201)
async def create_leave_type_endpoint(
    data: LeaveTypeCreate,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_actor_id)
):
    """Add a leave type to the catalog"""
    return create_leave_type(db, data, actor_id)


@router.get("", response_model=List[LeaveTypeOut])
async def list_leave_types_endpoint(
    active_only: bool = Query(False, description="Return only active leave types"),
    db: Session = Depends(get_db)
):
    """List the leave type catalog"""
    return list_leave_types(db, active_only=active_only)
