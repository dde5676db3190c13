"""
Leave policy schemas: leave type catalog, policy records and policy groups
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_serializer, field_validator, ConfigDict
from app.utils.datetime_utils import iso_8601_utc


class LeaveTypeCreate(BaseModel):
    """Schema for adding a leave type to the catalog"""
    name: str = Field(..., min_length=1, max_length=100, description="Display name, e.g. 'Casual Leave'")
    description: Optional[str] = None
    is_active: bool = True


class LeaveTypeOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class PolicyRecord(BaseModel):
    """
    Rules for one leave type inside a policy group.

    All day/count fields are non-negative integers. A value of 0 on a cap
    (max_leave_balance_in_year, max_sanction_in_service_life,
    max_balance_for_encashment) means the cap is not applied.
    """
    leave_type_id: int
    leave_type_name: str
    # Entitlement
    allowed_balance: int = Field(0, ge=0)
    max_leave_balance_in_year: int = Field(0, ge=0)
    max_sanction_in_service_life: int = Field(0, ge=0)
    # Carry-over
    balance_forwarding: bool = False
    max_forward_from_previous_year: int = Field(0, ge=0)
    # Cross-year and spacing
    leave_allow_between_multiple_years: bool = False
    interval_days_in_same_leave: int = Field(0, ge=0)
    negative_balance: bool = False
    max_limit_for_past_leave: int = Field(0, ge=0)
    # Continuous-use cap
    continuous_days_allow: bool = False
    continuous_sanction: int = Field(0, ge=0)
    half_day: bool = False
    max_balance_for_encashment: int = Field(0, ge=0)
    # Holiday adjacency
    is_prefix_allowed: bool = False
    is_suffix_allowed: bool = False
    # Evidence
    does_requires_leave_attachment: bool = False
    min_day_count_for_requiring_attachment: int = Field(0, ge=0)
    # Accrual / lead time
    allow_earn_leave: bool = False
    apply_future_leave_after_days: int = Field(0, ge=0)

    model_config = ConfigDict(from_attributes=True)


class PolicyRecordIn(PolicyRecord):
    """Policy record as submitted by an administrator; the name is filled from the catalog when omitted"""
    leave_type_name: Optional[str] = None


def _check_unique_leave_types(policies: Optional[List[PolicyRecordIn]]) -> Optional[List[PolicyRecordIn]]:
    if policies is None:
        return policies
    seen = set()
    for policy in policies:
        if policy.leave_type_id in seen:
            raise ValueError(f"leave type {policy.leave_type_id} appears more than once in the group")
        seen.add(policy.leave_type_id)
    return policies


class LeaveGroupCreate(BaseModel):
    """Schema for creating a policy group"""
    group_name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    is_active: bool = True
    policies: List[PolicyRecordIn] = Field(..., min_length=1, description="At least one leave type policy")

    @field_validator("policies")
    @classmethod
    def unique_leave_types(cls, v):
        return _check_unique_leave_types(v)


class LeaveGroupUpdate(BaseModel):
    """
    Schema for editing a policy group in place.

    When policies is given it replaces the whole ordered list.
    """
    group_name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    policies: Optional[List[PolicyRecordIn]] = Field(None, min_length=1)

    @field_validator("policies")
    @classmethod
    def unique_leave_types(cls, v):
        return _check_unique_leave_types(v)


class LeaveGroupOut(BaseModel):
    id: int
    group_name: str
    description: Optional[str] = None
    is_active: bool
    version: int
    policies: List[PolicyRecord]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)
