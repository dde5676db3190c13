"""
Employee service - employee directory and leave group assignment
"""
import logging
from typing import Optional
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from app.models.employee import Employee
from app.models.leave_group import LeaveGroup
from app.schemas.employee import EmployeeCreate
from app.services.audit_service import log_audit
from app.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


def _ensure_group_exists(db: Session, leave_group_id: Optional[int]) -> None:
    # Inactive groups may be assigned; they simply leave the employee ungoverned
    if leave_group_id is None:
        return
    if not db.query(LeaveGroup.id).filter(LeaveGroup.id == leave_group_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Leave group with id {leave_group_id} not found"
        )


def create_employee(db: Session, employee_data: EmployeeCreate, actor_id: str) -> Employee:
    """
    Register an employee in the directory

    Raises:
        HTTPException: If emp_code is taken or the leave group does not exist
    """
    existing = db.query(Employee).filter(Employee.emp_code == employee_data.emp_code).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Employee with emp_code '{employee_data.emp_code}' already exists"
        )
    _ensure_group_exists(db, employee_data.leave_group_id)

    now = now_utc()
    employee = Employee(
        emp_code=employee_data.emp_code,
        name=employee_data.name,
        leave_group_id=employee_data.leave_group_id,
        active=employee_data.active,
        created_at=now,
        updated_at=now,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="EMPLOYEE_CREATE",
        entity_type="employees",
        entity_id=employee.id,
        meta={"emp_code": employee.emp_code, "leave_group_id": employee.leave_group_id}
    )
    return employee


def get_employee(db: Session, employee_id: int) -> Employee:
    """
    Raises:
        HTTPException: 404 if the employee does not exist
    """
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee with id {employee_id} not found"
        )
    return employee


def assign_leave_group(
    db: Session,
    employee_id: int,
    leave_group_id: Optional[int],
    actor_id: str
) -> Employee:
    """
    Point an employee at a leave group (None removes the assignment).

    Takes effect for the next submission; existing applications are untouched.
    """
    employee = get_employee(db, employee_id)
    _ensure_group_exists(db, leave_group_id)

    before = employee.leave_group_id
    employee.leave_group_id = leave_group_id
    employee.updated_at = now_utc()
    db.commit()
    db.refresh(employee)

    logger.info(
        "leave group assignment: employee_id=%s before=%s after=%s",
        employee_id, before, leave_group_id,
    )
    log_audit(
        db=db,
        actor_id=actor_id,
        action="EMPLOYEE_LEAVE_GROUP_ASSIGN",
        entity_type="employees",
        entity_id=employee.id,
        meta={"before": before, "after": leave_group_id}
    )
    return employee
