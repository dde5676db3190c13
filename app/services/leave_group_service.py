"""
Leave group service - leave type catalog and policy groups

Groups are edited in place: every update bumps LeaveGroup.version. New
applications carry a snapshot of the record in force at submission, so
already-recorded history is not reinterpreted by later edits.
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from app.models.leave_group import LeaveTypeDefinition, LeaveGroup, LeavePolicy
from app.schemas.policy import (
    LeaveTypeCreate,
    LeaveGroupCreate,
    LeaveGroupUpdate,
    PolicyRecordIn,
)
from app.services.audit_service import log_audit
from app.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)

_POLICY_FIELDS = tuple(
    name for name in PolicyRecordIn.model_fields
    if name not in ("leave_type_id", "leave_type_name")
)


def create_leave_type(db: Session, data: LeaveTypeCreate, actor_id: str) -> LeaveTypeDefinition:
    """
    Add a leave type to the catalog

    Raises:
        HTTPException: 409 if the name is already taken
    """
    existing = db.query(LeaveTypeDefinition).filter(LeaveTypeDefinition.name == data.name).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Leave type '{data.name}' already exists"
        )

    now = now_utc()
    leave_type = LeaveTypeDefinition(
        name=data.name,
        description=data.description,
        is_active=data.is_active,
        created_at=now,
        updated_at=now,
    )
    db.add(leave_type)
    db.commit()
    db.refresh(leave_type)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="LEAVE_TYPE_CREATE",
        entity_type="leave_types",
        entity_id=leave_type.id,
        meta={"name": leave_type.name, "is_active": leave_type.is_active}
    )
    return leave_type


def list_leave_types(db: Session, active_only: bool = False) -> List[LeaveTypeDefinition]:
    query = db.query(LeaveTypeDefinition)
    if active_only:
        query = query.filter(LeaveTypeDefinition.is_active == True)
    return query.order_by(LeaveTypeDefinition.name).all()


def _build_policies(db: Session, records: List[PolicyRecordIn]) -> List[LeavePolicy]:
    """
    Turn submitted policy records into ORM rows, keeping submission order.

    Every leave_type_id must exist in the catalog; the display name is taken
    from the catalog when the record omits it.
    """
    ids = [record.leave_type_id for record in records]
    catalog = {
        t.id: t for t in db.query(LeaveTypeDefinition).filter(LeaveTypeDefinition.id.in_(ids)).all()
    }
    missing = [i for i in ids if i not in catalog]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown leave type id(s): {missing}"
        )

    rows = []
    for position, record in enumerate(records):
        values = {name: getattr(record, name) for name in _POLICY_FIELDS}
        rows.append(LeavePolicy(
            position=position,
            leave_type_id=record.leave_type_id,
            leave_type_name=record.leave_type_name or catalog[record.leave_type_id].name,
            **values,
        ))
    return rows


def get_leave_group(db: Session, group_id: int) -> LeaveGroup:
    """
    Raises:
        HTTPException: 404 if the group does not exist
    """
    group = db.query(LeaveGroup).filter(LeaveGroup.id == group_id).first()
    if not group:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Leave group with id {group_id} not found"
        )
    return group


def list_leave_groups(db: Session, active_only: bool = False) -> List[LeaveGroup]:
    query = db.query(LeaveGroup)
    if active_only:
        query = query.filter(LeaveGroup.is_active == True)
    return query.order_by(LeaveGroup.group_name).all()


def _ensure_unique_name(db: Session, group_name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(LeaveGroup).filter(LeaveGroup.group_name == group_name)
    if exclude_id is not None:
        query = query.filter(LeaveGroup.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Leave group '{group_name}' already exists"
        )


def create_leave_group(db: Session, data: LeaveGroupCreate, actor_id: str) -> LeaveGroup:
    """
    Create a policy group with its ordered policy records

    Raises:
        HTTPException: 409 on duplicate name, 400 on unknown leave type
    """
    _ensure_unique_name(db, data.group_name)

    now = now_utc()
    group = LeaveGroup(
        group_name=data.group_name,
        description=data.description,
        is_active=data.is_active,
        version=1,
        created_by=actor_id,
        updated_by=actor_id,
        created_at=now,
        updated_at=now,
    )
    group.policies = _build_policies(db, data.policies)
    db.add(group)
    db.commit()
    db.refresh(group)

    logger.info("leave group created: id=%s name=%s policies=%s", group.id, group.group_name, len(group.policies))
    log_audit(
        db=db,
        actor_id=actor_id,
        action="LEAVE_GROUP_CREATE",
        entity_type="leave_groups",
        entity_id=group.id,
        meta={"group_name": group.group_name, "leave_types": [p.leave_type_name for p in group.policies]}
    )
    return group


def update_leave_group(db: Session, group_id: int, data: LeaveGroupUpdate, actor_id: str) -> LeaveGroup:
    """
    Edit a policy group in place and bump its version

    When policies are given they replace the whole list.
    """
    group = get_leave_group(db, group_id)
    before = {"group_name": group.group_name, "is_active": group.is_active, "version": group.version}

    if data.group_name is not None and data.group_name != group.group_name:
        _ensure_unique_name(db, data.group_name, exclude_id=group.id)
        group.group_name = data.group_name
    if data.description is not None:
        group.description = data.description
    if data.is_active is not None:
        group.is_active = data.is_active
    if data.policies is not None:
        group.policies = []
        # Old rows must be gone before the (group, type) unique constraint sees the new ones
        db.flush()
        group.policies = _build_policies(db, data.policies)

    group.version = (group.version or 0) + 1
    group.updated_by = actor_id
    group.updated_at = now_utc()
    db.commit()
    db.refresh(group)

    logger.info("leave group updated: id=%s version %s -> %s", group.id, before["version"], group.version)
    log_audit(
        db=db,
        actor_id=actor_id,
        action="LEAVE_GROUP_UPDATE",
        entity_type="leave_groups",
        entity_id=group.id,
        meta={
            "before": before,
            "after": {"group_name": group.group_name, "is_active": group.is_active, "version": group.version},
            "policies_replaced": data.policies is not None,
        }
    )
    return group
