"""
Leave group (policy group) administration endpoints
"""
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_actor_id
from app.schemas.policy import LeaveGroupCreate, LeaveGroupUpdate, LeaveGroupOut
from app.services.leave_group_service import (
    create_leave_group,
    get_leave_group,
    list_leave_groups,
    update_leave_group,
)

router = APIRouter()


@router.post("", response_model=LeaveGroupOut, status_code=201)
async def create_leave_group_endpoint(
    data: LeaveGroupCreate,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_actor_id)
):
    """
    Create a leave group

    Policies keep their submission order; each leave type may appear once.
    """
    return create_leave_group(db, data, actor_id)


@router.get("", response_model=List[LeaveGroupOut])
async def list_leave_groups_endpoint(
    active_only: bool = Query(False, description="Return only active groups"),
    db: Session = Depends(get_db)
):
    return list_leave_groups(db, active_only=active_only)


@router.get("/{group_id}", response_model=LeaveGroupOut)
async def get_leave_group_endpoint(group_id: int, db: Session = Depends(get_db)):
    return get_leave_group(db, group_id)


@router.put("/{group_id}", response_model=LeaveGroupOut)
async def update_leave_group_endpoint(
    group_id: int,
    data: LeaveGroupUpdate,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_actor_id)
):
    """
    Edit a leave group in place (bumps its version)

    Applications submitted earlier keep the policy snapshot they were validated against.
    """
    return update_leave_group(db, group_id, data, actor_id)
