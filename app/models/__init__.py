"""
Database models
"""
from app.models.employee import Employee
from app.models.audit_log import AuditLog
from app.models.leave_group import LeaveTypeDefinition, LeaveGroup, LeavePolicy
from app.models.leave import (
    LeaveApplication,
    LeaveLedgerCounter,
    LeaveStatus,
    TERMINAL_LEAVE_STATUSES,
)
from app.models.holiday import Holiday

__all__ = [
    "Employee",
    "AuditLog",
    "LeaveTypeDefinition",
    "LeaveGroup",
    "LeavePolicy",
    "LeaveApplication",
    "LeaveLedgerCounter",
    "LeaveStatus",
    "TERMINAL_LEAVE_STATUSES",
    "Holiday",
]
