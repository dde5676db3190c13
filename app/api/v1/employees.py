"""
Employee directory endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_actor_id
from app.schemas.employee import EmployeeCreate, EmployeeOut, LeaveGroupAssign
from app.services.employee_service import create_employee, get_employee, assign_leave_group

router = APIRouter()


@router.post("", response_model=EmployeeOut, status_code=201)
async def create_employee_endpoint(
    employee_data: EmployeeCreate,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_actor_id)
):
    """Register an employee, optionally with a leave group"""
    return create_employee(db, employee_data, actor_id)


@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee_endpoint(employee_id: int, db: Session = Depends(get_db)):
    return get_employee(db, employee_id)


@router.put("/{employee_id}/leave-group", response_model=EmployeeOut)
async def assign_leave_group_endpoint(
    employee_id: int,
    data: LeaveGroupAssign,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_actor_id)
):
    """Assign (or clear) the employee's leave group"""
    return assign_leave_group(db, employee_id, data.leave_group_id, actor_id)
