"""
Leave application models
"""
from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    ForeignKey,
    String,
    Text,
    Numeric,
    Boolean,
    JSON,
    Enum as SQLEnum,
    UniqueConstraint,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from app.db.base import Base


class LeaveStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


# Approve/reject are final
TERMINAL_LEAVE_STATUSES = frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED})


class LeaveApplication(Base):
    __tablename__ = "leave_applications"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    # Denormalized for display, as captured at submission
    employee_name = Column(String, nullable=True)
    employee_code = Column(String, nullable=True)
    leave_type = Column(String(100), nullable=False, index=True)  # leave type name, not the policy id
    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=False)
    half_day = Column(Boolean, nullable=False, default=False)
    requested_days = Column(Numeric(6, 2), nullable=False)  # 0.5 granularity
    reason = Column(Text, nullable=True)
    attachment_ref = Column(String, nullable=True)
    status = Column(
        SQLEnum(LeaveStatus, values_callable=lambda e: [m.value for m in e], name="leave_status"),
        nullable=False,
        default=LeaveStatus.PENDING,
    )
    created_by = Column(String, nullable=False)
    decided_by = Column(String, nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)
    decision_remark = Column(Text, nullable=True)
    # Copy of the policy record in force at submission (None when ungoverned)
    policy_snapshot = Column(JSON, nullable=True)
    policy_version = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    employee = relationship("Employee", back_populates="leave_applications")

    __table_args__ = (
        Index('ix_leave_applications_employee_type', 'employee_id', 'leave_type'),
        Index('ix_leave_applications_employee_dates', 'employee_id', 'from_date', 'to_date'),
        CheckConstraint('from_date <= to_date', name='check_from_date_le_to_date'),
    )


class LeaveLedgerCounter(Base):
    """
    Optimistic-concurrency sequence per (employee, leave type).

    Every submission and approval bumps version with a conditional update;
    a writer that read a stale version loses and must re-validate.
    """
    __tablename__ = "leave_ledger_counters"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    leave_type = Column(String(100), nullable=False)
    version = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("employee_id", "leave_type", name="uq_leave_ledger_counters_employee_type"),
    )
