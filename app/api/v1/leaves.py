"""
Leave endpoints
"""
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_actor_id
from app.models.leave import LeaveStatus
from app.schemas.leave import (
    LeaveApplyRequest,
    LeaveApplyResponse,
    LeaveOut,
    LeaveListResponse,
    DecisionRequest,
    BalanceOut,
    BalanceListResponse,
)
from app.services.leave_service import (
    submit_application,
    list_applications,
    get_leave_balances,
    approve_application,
    reject_application,
)
from app.utils.datetime_utils import today_utc
from app.services.notification_service import (
    EVENT_NEW_REQUEST,
    EVENT_STATUS_CHANGE,
    build_event,
    dispatch_leave_event,
)

router = APIRouter()


@router.post("/apply", response_model=LeaveApplyResponse, status_code=201)
async def apply_leave_endpoint(
    leave_data: LeaveApplyRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_actor_id)
):
    """
    Submit a leave application

    The request is checked against the employee's leave group; on success it is
    stored as Pending and the projected balance per touched year is returned.
    A failed check returns 400 with the reason in `detail`.
    """
    application, projected = submit_application(db, leave_data, actor_id)
    background_tasks.add_task(dispatch_leave_event, build_event(EVENT_NEW_REQUEST, application))
    return LeaveApplyResponse(
        application=LeaveOut.model_validate(application),
        projected_balances=[BalanceOut.model_validate(b) for _, b in sorted(projected.items())],
    )


@router.get("/employee/{employee_id}", response_model=LeaveListResponse)
async def list_employee_leaves(
    employee_id: int,
    status: Optional[LeaveStatus] = Query(None, description="Filter by status"),
    year: Optional[int] = Query(None, description="Only applications touching this year"),
    db: Session = Depends(get_db)
):
    """Leave history of an employee, newest first"""
    items = list_applications(db, employee_id, status_filter=status, year=year)
    return LeaveListResponse(items=[LeaveOut.model_validate(a) for a in items], total=len(items))


@router.get("/balance/{employee_id}", response_model=BalanceListResponse)
async def employee_balance(
    employee_id: int,
    year: Optional[int] = Query(None, description="Calendar year (defaults to the current year)"),
    db: Session = Depends(get_db)
):
    """
    Balances of every leave type in the employee's group for the year.

    Without an active group the figures are usage-only (allowed/remaining null).
    """
    year = year or today_utc().year
    governed, balances = get_leave_balances(db, employee_id, year)
    return BalanceListResponse(
        employee_id=employee_id,
        year=year,
        governed=governed,
        balances=[BalanceOut.model_validate(b) for b in balances],
    )


@router.post("/{application_id}/approve", response_model=LeaveOut)
async def approve_leave_endpoint(
    application_id: int,
    background_tasks: BackgroundTasks,
    decision: Optional[DecisionRequest] = None,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_actor_id)
):
    """
    Approve a Pending application

    The balance is re-checked first; 409 if the application is no longer Pending.
    """
    application = approve_application(db, application_id, actor_id, decision.remarks if decision else None)
    background_tasks.add_task(dispatch_leave_event, build_event(EVENT_STATUS_CHANGE, application))
    return application


@router.post("/{application_id}/reject", response_model=LeaveOut)
async def reject_leave_endpoint(
    application_id: int,
    background_tasks: BackgroundTasks,
    decision: Optional[DecisionRequest] = None,
    db: Session = Depends(get_db),
    actor_id: str = Depends(get_actor_id)
):
    """Reject a Pending application; 409 if it is no longer Pending"""
    application = reject_application(db, application_id, actor_id, decision.remarks if decision else None)
    background_tasks.add_task(dispatch_leave_event, build_event(EVENT_STATUS_CHANGE, application))
    return application
