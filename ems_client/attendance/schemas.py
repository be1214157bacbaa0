"""Attendance pydantic v2 schemas."""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import Field, field_validator

from ems_client.common.schemas import WireModel
from ems_client.core_hr.schemas import EmployeeBrief


class AttendanceRecordOut(WireModel):
    """One employee-day as stored by the backend."""

    attendance_id: int = Field(..., alias="attendance_id")
    employee: EmployeeBrief
    date: dt.date
    clock_in: Optional[dt.datetime] = None
    clock_out: Optional[dt.datetime] = None
    status: Optional[str] = None
    working_hrs: Optional[float] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @field_validator("date", mode="before")
    @classmethod
    def _strip_time(cls, value: Any) -> Any:
        # The backend sometimes serializes the day as a full timestamp
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        if isinstance(value, dt.datetime):
            return value.date()
        return value


class AttendanceRow(WireModel):
    """Display values derived from one record."""

    attendance_id: int
    employee_id: int
    employee_name: str
    date: dt.date
    clock_in: str
    clock_out: str
    status: str
    working_hours: str
