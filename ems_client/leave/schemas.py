"""Leave pydantic v2 schemas — request / response shapes.

Naming conventions:
  - *Create  → request bodies (write)
  - *Out     → records read from the backend
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from ems_client.common.constants import LeaveStatus, LeaveType
from ems_client.common.schemas import WireModel
from ems_client.core_hr.schemas import Employee, EmployeeBrief


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Create
# ═════════════════════════════════════════════════════════════════════


class LeaveApplication(WireModel):
    """Raw form input; every field may still be missing."""

    employee_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    leave_type: Optional[LeaveType] = LeaveType.ANNUAL
    reason: Optional[str] = None


class LeaveRequestCreate(WireModel):
    """Payload for ``POST /leave``."""

    employee_id: int
    start_date: date
    end_date: date
    total_days: int = Field(..., ge=1, alias="totaldays")
    leave_type: LeaveType
    reason: str
    status: LeaveStatus = LeaveStatus.PENDING


# ═════════════════════════════════════════════════════════════════════
# Leave Request — Response
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestOut(WireModel):
    leave_id: int = Field(..., alias="leave_id")
    employee: EmployeeBrief
    leave_type: Optional[str] = None
    start_date: date
    end_date: date
    total_days: Optional[int] = Field(None, alias="totaldays")
    reason: Optional[str] = None
    status: LeaveStatus = LeaveStatus.PENDING
    approved_by: Optional[Employee] = None
    approval_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def _null_status_is_pending(cls, value: Any) -> Any:
        return LeaveStatus.PENDING if value is None else value

    @property
    def employee_id(self) -> int:
        return self.employee.employee_id


# ═════════════════════════════════════════════════════════════════════
# Filters
# ═════════════════════════════════════════════════════════════════════


class LeaveFilter(WireModel):
    """Active list filters; None means "all"."""

    status: Optional[LeaveStatus] = None
    employee_id: Optional[int] = None
