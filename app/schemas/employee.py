"""
Employee directory schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_serializer, ConfigDict
from app.utils.datetime_utils import iso_8601_utc


class EmployeeCreate(BaseModel):
    """Schema for registering an employee in the directory"""
    emp_code: str = Field(..., min_length=1, description="Employee code (unique)")
    name: str = Field(..., min_length=1, description="Employee name")
    leave_group_id: Optional[int] = Field(None, description="Leave group governing this employee")
    active: bool = Field(default=True, description="Employee active status")


class LeaveGroupAssign(BaseModel):
    """Schema for (re)assigning an employee's leave group; null removes the assignment"""
    leave_group_id: Optional[int] = None


class EmployeeOut(BaseModel):
    id: int
    emp_code: str
    name: str
    leave_group_id: Optional[int] = None
    active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)
