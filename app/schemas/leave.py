"""
Leave application and balance schemas
"""
from datetime import date, datetime
from typing import Optional, List
from decimal import Decimal
from pydantic import BaseModel, Field, field_serializer, ConfigDict
from app.models.leave import LeaveStatus
from app.utils.datetime_utils import iso_8601_utc


class LeaveApplyRequest(BaseModel):
    """
    Schema for submitting a leave application.

    Date order is checked by the engine, not here, so the submitter gets the
    engine's reason ("invalid range") instead of a schema error.
    """
    employee_id: int = Field(..., description="Employee the leave is for (self or delegate submission)")
    leave_type: str = Field(..., min_length=1, description="Leave type name as listed in the employee's group")
    from_date: date = Field(..., description="First day of leave (inclusive)")
    to_date: date = Field(..., description="Last day of leave (inclusive)")
    reason: str = Field(..., min_length=1, description="Purpose of the leave")
    half_day: bool = Field(False, description="Half-day request; only for single-day ranges")
    attachment_ref: Optional[str] = Field(None, description="Reference to uploaded evidence (document id or URL)")


class DecisionRequest(BaseModel):
    """Schema for approving or rejecting a pending application"""
    remarks: Optional[str] = Field(None, description="Optional remarks recorded with the decision")


class LeaveOut(BaseModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    employee_code: Optional[str] = None
    leave_type: str
    from_date: date
    to_date: date
    half_day: bool
    requested_days: Decimal
    reason: Optional[str] = None
    attachment_ref: Optional[str] = None
    status: LeaveStatus
    created_by: str
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    decision_remark: Optional[str] = None
    policy_version: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", "decided_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class LeaveListResponse(BaseModel):
    items: List[LeaveOut]
    total: int


class BalanceOut(BaseModel):
    """
    Derived balance for one leave type and year.

    allowed/remaining are None when the leave type is not governed by a policy.
    """
    leave_type: str
    year: int
    allowed: Optional[float] = None
    forwarded: float = 0.0
    used: float
    remaining: Optional[float] = None
    encashable: Optional[float] = None
    lifetime_used: float = 0.0
    enforced: bool = True

    model_config = ConfigDict(from_attributes=True)


class BalanceListResponse(BaseModel):
    employee_id: int
    year: int
    governed: bool = Field(..., description="False when the employee has no active leave group")
    balances: List[BalanceOut]


class LeaveApplyResponse(BaseModel):
    application: LeaveOut
    projected_balances: List[BalanceOut] = Field(
        default_factory=list,
        description="Balance after this request per touched year (display only, not stored)",
    )
