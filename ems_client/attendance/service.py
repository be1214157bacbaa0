"""Attendance workflow — clock events, absences and derived display values."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

from ems_client.attendance.client import AttendanceApi
from ems_client.attendance.schemas import AttendanceRecordOut, AttendanceRow
from ems_client.auth.permissions import has_permission
from ems_client.auth.schemas import SessionUser
from ems_client.common.constants import AttendanceDisplayStatus, AttendanceMark
from ems_client.common.exceptions import AppException, required_fields_error
from ems_client.common.view import ViewController
from ems_client.core_hr.client import EmployeeApi
from ems_client.core_hr.schemas import Employee

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


# ── Pure helpers ────────────────────────────────────────────────────

def derive_status(
    explicit_status: Optional[str],
    clock_in: Optional[datetime],
    clock_out: Optional[datetime],
) -> str:
    """Server status wins; otherwise Working, Present or Absent from the clock events."""
    if explicit_status:
        return explicit_status
    if clock_in and not clock_out:
        return AttendanceDisplayStatus.WORKING.value
    if clock_in and clock_out:
        return AttendanceDisplayStatus.PRESENT.value
    return AttendanceDisplayStatus.ABSENT.value


def working_hours(clock_in: Optional[datetime], clock_out: Optional[datetime]) -> str:
    """``"8.50 hrs"`` when both events are present, ``"N/A"`` otherwise.

    A clock-out earlier than the clock-in is also ``"N/A"``.
    """
    if not (clock_in and clock_out):
        return NOT_AVAILABLE
    seconds = (clock_out - clock_in).total_seconds()
    if seconds < 0:
        return NOT_AVAILABLE
    hours = seconds / 3600
    return f"{hours:.2f} hrs"


def format_time(value: Optional[datetime]) -> str:
    return value.strftime("%H:%M") if value else NOT_AVAILABLE


# ═════════════════════════════════════════════════════════════════════
# AttendanceWorkflow
# ═════════════════════════════════════════════════════════════════════


class AttendanceWorkflow(ViewController):
    """Attendance screen controller bound to one session.

    Marking is offered to ADMIN/HR only (:attr:`can_mark`), but the
    backend is what actually refuses unauthorized calls.
    """

    def __init__(
        self,
        session: Optional[SessionUser],
        attendance: AttendanceApi,
        employees: EmployeeApi,
        *,
        selected_date: Optional[date] = None,
    ) -> None:
        super().__init__(session)
        self._attendance = attendance
        self._employees = employees
        self.selected_date: Optional[date] = selected_date or date.today()
        self.selected_employee: Optional[int] = None
        self.records: list[AttendanceRecordOut] = []
        self.employees: list[Employee] = []

    @property
    def can_mark(self) -> bool:
        return has_permission(self.session, "attendance:mark")

    # ─────────────────────────────────────────────────────────────────
    # Listing
    # ─────────────────────────────────────────────────────────────────

    async def select(
        self,
        *,
        employee_id: Optional[int] = None,
        day: Optional[date] = None,
    ) -> list[AttendanceRecordOut]:
        """Change the employee/date filters and refetch."""
        self.selected_employee = employee_id
        self.selected_date = day
        return await self.refresh()

    async def refresh(self) -> list[AttendanceRecordOut]:
        try:
            current, result = await self._load(self._fetch)
        except AppException as exc:
            logger.error("Error fetching attendance data: %s", exc)
            raise
        if current and result is not None:
            self.employees, self.records = result
        return self.records

    async def _fetch(self) -> tuple[list[Employee], list[AttendanceRecordOut]]:
        employees = await self._employees.list()
        if self.selected_employee is not None:
            records = await self._attendance.list_by_employee(self.selected_employee)
        else:
            records = await self._attendance.list()
        if self.selected_date is not None:
            records = [r for r in records if r.date == self.selected_date]
        return employees, records

    def rows(self) -> list[AttendanceRow]:
        """Display rows for the current records."""
        names = {emp.employee_id: emp.full_name for emp in self.employees}
        rows: list[AttendanceRow] = []
        for record in self.records:
            emp_id = record.employee.employee_id
            rows.append(
                AttendanceRow(
                    attendance_id=record.attendance_id,
                    employee_id=emp_id,
                    employee_name=names.get(emp_id) or f"ID: {emp_id}",
                    date=record.date,
                    clock_in=format_time(record.clock_in),
                    clock_out=format_time(record.clock_out),
                    status=derive_status(record.status, record.clock_in, record.clock_out),
                    working_hours=working_hours(record.clock_in, record.clock_out),
                )
            )
        return rows

    # ─────────────────────────────────────────────────────────────────
    # Marking
    # ─────────────────────────────────────────────────────────────────

    async def clock_in(self, employee_id: Optional[int] = None) -> Any:
        return await self.mark(AttendanceMark.IN, employee_id)

    async def clock_out(self, employee_id: Optional[int] = None) -> Any:
        return await self.mark(AttendanceMark.OUT, employee_id)

    async def mark_absent(
        self,
        employee_id: Optional[int] = None,
        day: Optional[date] = None,
    ) -> Any:
        return await self.mark(AttendanceMark.ABSENT, employee_id, day)

    async def mark(
        self,
        kind: AttendanceMark,
        employee_id: Optional[int] = None,
        day: Optional[date] = None,
    ) -> Any:
        """Record a clock-in, clock-out or absence, then refetch."""
        employee_id = employee_id if employee_id is not None else self.selected_employee
        if employee_id is None:
            raise required_fields_error(["employee_id"], "Please select an employee")

        kind = AttendanceMark(kind)
        if kind == AttendanceMark.IN:
            result = await self._attendance.clock_in(employee_id)
        elif kind == AttendanceMark.OUT:
            result = await self._attendance.clock_out(employee_id)
        else:
            absent_on = day or self.selected_date or date.today()
            result = await self._attendance.mark_absent(employee_id, absent_on)
        logger.info("Attendance %s recorded for employee %s", kind.value, employee_id)

        await self._refresh_after_change()
        return result
