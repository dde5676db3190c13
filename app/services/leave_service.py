"""
Leave service - submission, balances and the Pending -> Approved | Rejected workflow

Balances are never stored. Every submission and approval recomputes them from
the employee's approved history and the policy group.

Two writers for the same (employee, leave type) are serialized with the ledger
counter: the version is read before validation and bumped with a conditional
UPDATE just before commit. A writer whose UPDATE matches no row lost the race,
rolls back and re-validates against the fresh history.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from app.core.config import settings
from app.core.errors import (
    ConcurrentSubmissionError,
    ConfigurationError,
    DataAccessError,
    InvalidTransitionError,
    LeaveEngineError,
)
from app.models.employee import Employee
from app.models.leave import LeaveApplication, LeaveLedgerCounter, LeaveStatus, TERMINAL_LEAVE_STATUSES
from app.models.leave_group import LeaveGroup, LeaveTypeDefinition
from app.schemas.leave import LeaveApplyRequest
from app.schemas.policy import PolicyRecord
from app.services.audit_service import log_audit
from app.services.balance_calculator import (
    Balance,
    requested_days,
    split_days_by_year,
    ungoverned_balance,
    year_balance,
)
from app.services.employee_service import get_employee
from app.services.holiday_service import get_holiday_dates
from app.services.policy_validator import (
    validate_application,
    validate_balance,
    validate_following_year,
    validate_ungoverned,
)
from app.utils.datetime_utils import now_utc, today_utc
from app.utils.json_serializer import sanitize_for_json

logger = logging.getLogger(__name__)


def resolve_live_policy(employee: Employee, leave_type: str) -> Tuple[LeaveGroup, PolicyRecord]:
    """
    Policy record governing leave_type for the employee right now.

    Raises:
        ConfigurationError: no group, inactive group, or no record for the type
    """
    group = employee.leave_group
    if group is None:
        raise ConfigurationError(f"employee {employee.id} has no leave group")
    if not group.is_active:
        raise ConfigurationError(f"leave group {group.id} is inactive")
    for policy in group.policies:
        if policy.leave_type_name == leave_type:
            return group, PolicyRecord.model_validate(policy)
    raise ConfigurationError(f"leave group {group.id} has no policy for leave type '{leave_type}'")


def _resolve_or_degrade(employee: Employee, leave_type: str) -> Tuple[Optional[LeaveGroup], Optional[PolicyRecord]]:
    try:
        return resolve_live_policy(employee, leave_type)
    except ConfigurationError as e:
        logger.warning(
            "balance enforcement disabled: employee_id=%s leave_type=%s reason=%s",
            employee.id, leave_type, e.reason,
        )
        return None, None


def load_history(
    db: Session,
    employee_id: int,
    exclude_application_id: Optional[int] = None
) -> List[LeaveApplication]:
    """
    All applications of the employee, any type and status

    Raises:
        DataAccessError: the store could not be read
    """
    try:
        query = db.query(LeaveApplication).filter(LeaveApplication.employee_id == employee_id)
        if exclude_application_id is not None:
            query = query.filter(LeaveApplication.id != exclude_application_id)
        return query.order_by(LeaveApplication.from_date, LeaveApplication.id).all()
    except SQLAlchemyError as e:
        logger.error("history read failed: employee_id=%s error=%s", employee_id, e)
        raise DataAccessError() from e


def balances_for_range(
    policy: PolicyRecord,
    history: List[LeaveApplication],
    from_date: date,
    to_date: date,
    today: date
) -> Dict[int, Balance]:
    """Balance for every calendar year the range touches"""
    return {
        year: year_balance(policy, history, year, today)
        for year in range(from_date.year, max(from_date, to_date).year + 1)
    }


def following_year_balance(
    policy: PolicyRecord,
    history: List[LeaveApplication],
    employee_id: int,
    from_date: date,
    to_date: date,
    half_day: bool,
    today: date
) -> Optional[Balance]:
    """
    Balance of the year after the range, as if the range were approved.

    None when the policy does not forward balance, since the range cannot
    change that year then.
    """
    if not policy.balance_forwarding:
        return None
    as_approved = LeaveApplication(
        employee_id=employee_id,
        leave_type=policy.leave_type_name,
        from_date=from_date,
        to_date=to_date,
        half_day=half_day,
        status=LeaveStatus.APPROVED,
    )
    year = max(from_date, to_date).year + 1
    return year_balance(policy, list(history) + [as_approved], year, today)


def _load_employee(db: Session, employee_id: int) -> Employee:
    """get_employee for ledger paths; a failed read fails closed"""
    try:
        return get_employee(db, employee_id)
    except SQLAlchemyError as e:
        logger.error("employee read failed: employee_id=%s error=%s", employee_id, e)
        raise DataAccessError() from e


def get_leave_balances(
    db: Session,
    employee_id: int,
    year: int,
    today: Optional[date] = None
) -> Tuple[bool, List[Balance]]:
    """
    Balances of every leave type for the employee in year.

    Returns:
        (governed, balances). When the employee has no active group the
        balances are usage-only for the active catalog types.
    """
    today = today or today_utc()
    employee = _load_employee(db, employee_id)
    history = load_history(db, employee_id)

    try:
        group = employee.leave_group
        if group is not None and group.is_active:
            return True, [
                year_balance(PolicyRecord.model_validate(row), history, year, today)
                for row in group.policies
            ]

        catalog = [t.name for t in db.query(LeaveTypeDefinition).filter(LeaveTypeDefinition.is_active == True)
                   .order_by(LeaveTypeDefinition.name).all()]
    except SQLAlchemyError as e:
        logger.error("balance read failed: employee_id=%s error=%s", employee_id, e)
        raise DataAccessError() from e

    logger.warning("balances requested for ungoverned employee: employee_id=%s", employee_id)
    leave_types = catalog + sorted({a.leave_type for a in history} - set(catalog))
    return False, [ungoverned_balance(name, year, history) for name in leave_types]


def _ensure_counter(db: Session, employee_id: int, leave_type: str) -> bool:
    """
    Create the counter row inside the caller's transaction if it is missing.

    Returns False when a concurrent writer created it first; the transaction
    has then been rolled back and the caller should start over.
    """
    exists = db.query(LeaveLedgerCounter.id).filter(
        LeaveLedgerCounter.employee_id == employee_id,
        LeaveLedgerCounter.leave_type == leave_type
    ).first()
    if exists:
        return True
    db.add(LeaveLedgerCounter(employee_id=employee_id, leave_type=leave_type, version=0))
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        return False
    return True


def _counter_version(db: Session, employee_id: int, leave_type: str) -> int:
    return db.query(LeaveLedgerCounter.version).filter(
        LeaveLedgerCounter.employee_id == employee_id,
        LeaveLedgerCounter.leave_type == leave_type
    ).scalar()


def _bump_counter(db: Session, employee_id: int, leave_type: str, read_version: int) -> bool:
    """UPDATE ... WHERE version = :read_version; False when another writer got there first"""
    updated = db.query(LeaveLedgerCounter).filter(
        LeaveLedgerCounter.employee_id == employee_id,
        LeaveLedgerCounter.leave_type == leave_type,
        LeaveLedgerCounter.version == read_version
    ).update({LeaveLedgerCounter.version: read_version + 1}, synchronize_session=False)
    return updated == 1


def _attempt_submit(
    db: Session,
    employee: Employee,
    request: LeaveApplyRequest,
    actor_id: str,
    today: date
) -> Tuple[Optional[LeaveApplication], Dict[int, Balance]]:
    """One validate-and-insert pass; returns (None, ...) when the ledger counter moved"""
    if not _ensure_counter(db, employee.id, request.leave_type):
        return None, {}
    read_version = _counter_version(db, employee.id, request.leave_type)
    history = load_history(db, employee.id)

    group, policy = _resolve_or_degrade(employee, request.leave_type)
    if policy is None:
        validate_ungoverned(request, history)
        projected = {}
    else:
        balances = balances_for_range(policy, history, request.from_date, request.to_date, today)
        following = following_year_balance(
            policy, history, employee.id, request.from_date, request.to_date, request.half_day, today
        )
        holidays = get_holiday_dates(db, request.from_date, request.to_date)
        projected = validate_application(request, policy, balances, history, today, holidays, following)

    snapshot = None
    if policy is not None and settings.SNAPSHOT_POLICY_ON_SUBMIT:
        snapshot = sanitize_for_json(policy)

    now = now_utc()
    application = LeaveApplication(
        employee_id=employee.id,
        employee_name=employee.name,
        employee_code=employee.emp_code,
        leave_type=request.leave_type,
        from_date=request.from_date,
        to_date=request.to_date,
        half_day=request.half_day,
        requested_days=Decimal(str(requested_days(request.from_date, request.to_date, request.half_day))),
        reason=request.reason,
        attachment_ref=request.attachment_ref,
        status=LeaveStatus.PENDING,
        created_by=actor_id,
        policy_snapshot=snapshot,
        policy_version=group.version if snapshot is not None else None,
        created_at=now,
        updated_at=now,
    )
    db.add(application)
    db.flush()

    log_audit(
        db=db,
        actor_id=actor_id,
        action="LEAVE_APPLY",
        entity_type="leave_applications",
        entity_id=application.id,
        meta={
            "employee_id": employee.id,
            "leave_type": request.leave_type,
            "from_date": request.from_date,
            "to_date": request.to_date,
            "requested_days": application.requested_days,
            "governed": policy is not None,
            "status": LeaveStatus.PENDING,
        },
        commit=False,
    )

    if not _bump_counter(db, employee.id, request.leave_type, read_version):
        return None, projected

    db.commit()
    db.refresh(application)
    return application, projected


def submit_application(
    db: Session,
    request: LeaveApplyRequest,
    actor_id: str,
    today: Optional[date] = None
) -> Tuple[LeaveApplication, Dict[int, Balance]]:
    """
    Validate a leave request and record it as Pending.

    Either the application is created in Pending (with its audit row) or
    nothing is written.

    Args:
        db: Database session
        request: Leave request
        actor_id: Identity of the submitter (the employee or a delegate)
        today: Reference date for backdating and lead-time rules

    Returns:
        (application, projected balance per touched year)

    Raises:
        LeaveValidationError: A policy check failed (reason is user-facing)
        DataAccessError: The store could not be read or written
        ConcurrentSubmissionError: Lost the ledger counter on every attempt
    """
    today = today or today_utc()
    employee = _load_employee(db, request.employee_id)
    if not employee.active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Employee with id {employee.id} is inactive"
        )

    attempts = settings.SUBMIT_MAX_RETRIES + 1
    for attempt in range(1, attempts + 1):
        try:
            application, projected = _attempt_submit(db, employee, request, actor_id, today)
        except LeaveEngineError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("leave submission failed: employee_id=%s error=%s", request.employee_id, e)
            raise DataAccessError() from e

        if application is not None:
            logger.info(
                "leave submitted: application_id=%s employee_id=%s leave_type=%s days=%s",
                application.id, employee.id, application.leave_type, application.requested_days,
            )
            return application, projected

        db.rollback()
        logger.warning(
            "ledger counter conflict: employee_id=%s leave_type=%s attempt=%s/%s",
            request.employee_id, request.leave_type, attempt, attempts,
        )

    raise ConcurrentSubmissionError()


def get_application(db: Session, application_id: int) -> LeaveApplication:
    """
    Raises:
        HTTPException: 404 if the application does not exist
    """
    application = db.query(LeaveApplication).filter(LeaveApplication.id == application_id).first()
    if not application:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Leave application with id {application_id} not found"
        )
    return application


def list_applications(
    db: Session,
    employee_id: int,
    status_filter: Optional[LeaveStatus] = None,
    year: Optional[int] = None
) -> List[LeaveApplication]:
    """Applications of one employee, newest first. Includes every status."""
    get_employee(db, employee_id)
    query = db.query(LeaveApplication).filter(LeaveApplication.employee_id == employee_id)
    if status_filter is not None:
        query = query.filter(LeaveApplication.status == status_filter)
    if year is not None:
        query = query.filter(
            LeaveApplication.from_date <= date(year, 12, 31),
            LeaveApplication.to_date >= date(year, 1, 1)
        )
    return query.order_by(LeaveApplication.from_date.desc(), LeaveApplication.id.desc()).all()


def _revalidate_for_approval(db: Session, application: LeaveApplication, today: date) -> None:
    """
    Balance check for an application about to be approved, excluding itself.

    Other applications approved since submission are part of the history now.
    With forwarding on, the year after the application is re-checked too:
    approving December leave can shrink what January already relied on.
    """
    employee = application.employee
    _, policy = _resolve_or_degrade(employee, application.leave_type)
    if policy is None:
        return
    history = load_history(db, employee.id, exclude_application_id=application.id)
    balances = balances_for_range(policy, history, application.from_date, application.to_date, today)
    days_by_year = split_days_by_year(application.from_date, application.to_date, bool(application.half_day))
    validate_balance(days_by_year, policy, balances)
    validate_following_year(policy, following_year_balance(
        policy, history, employee.id, application.from_date, application.to_date, bool(application.half_day), today
    ))


def _decide(
    db: Session,
    application_id: int,
    decision: LeaveStatus,
    actor_id: str,
    remarks: Optional[str],
    today: Optional[date]
) -> LeaveApplication:
    today = today or today_utc()
    action = "approve" if decision == LeaveStatus.APPROVED else "reject"
    try:
        application = get_application(db, application_id)
    except SQLAlchemyError as e:
        logger.error("application read failed: application_id=%s error=%s", application_id, e)
        raise DataAccessError() from e

    if application.status in TERMINAL_LEAVE_STATUSES:
        raise InvalidTransitionError(
            f"Cannot {action} leave application with status {LeaveStatus(application.status).value}"
        )

    before_status = LeaveStatus(application.status).value
    try:
        if decision == LeaveStatus.APPROVED:
            if not _ensure_counter(db, application.employee_id, application.leave_type):
                raise ConcurrentSubmissionError()
            read_version = _counter_version(db, application.employee_id, application.leave_type)
            _revalidate_for_approval(db, application, today)

        application.status = decision
        application.decided_by = actor_id
        application.decided_at = now_utc()
        application.decision_remark = remarks
        application.updated_at = application.decided_at

        log_audit(
            db=db,
            actor_id=actor_id,
            action=f"LEAVE_{action.upper()}",
            entity_type="leave_applications",
            entity_id=application.id,
            meta={
                "employee_id": application.employee_id,
                "leave_type": application.leave_type,
                "before": before_status,
                "after": decision,
                "remarks": remarks,
            },
            commit=False,
        )

        if decision == LeaveStatus.APPROVED and not _bump_counter(
            db, application.employee_id, application.leave_type, read_version
        ):
            raise ConcurrentSubmissionError()

        db.commit()
    except LeaveEngineError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("leave decision failed: application_id=%s error=%s", application_id, e)
        raise DataAccessError() from e

    db.refresh(application)
    logger.info(
        "leave status transition: application_id=%s before=%s after=%s action=%s",
        application.id, before_status, decision.value, action,
    )
    return application


def approve_application(
    db: Session,
    application_id: int,
    actor_id: str,
    remarks: Optional[str] = None,
    today: Optional[date] = None
) -> LeaveApplication:
    """
    Pending -> Approved

    Re-checks the balance against the current approved history before the
    status changes, so approval never takes used above allowed unless the
    policy permits a negative balance.

    Raises:
        InvalidTransitionError: The application is not Pending
        LeaveValidationError: Approval would overdraw the balance
        DataAccessError: The store could not be read or written
    """
    return _decide(db, application_id, LeaveStatus.APPROVED, actor_id, remarks, today)


def reject_application(
    db: Session,
    application_id: int,
    actor_id: str,
    remarks: Optional[str] = None,
    today: Optional[date] = None
) -> LeaveApplication:
    """Pending -> Rejected"""
    return _decide(db, application_id, LeaveStatus.REJECTED, actor_id, remarks, today)
