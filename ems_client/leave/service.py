"""Leave workflow — application, filtered listing and the approval state machine.

Business rules:
  - ``PENDING → {APPROVED, REJECTED, CANCELLED}``; the last three are terminal
  - ADMIN/HR review any request, a MANAGER any request but their own
  - only the requesting employee cancels, and only while PENDING
  - every successful change is followed by a full refetch of the current view;
    a failed refetch marks the view ``stale`` and does not undo the success
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Optional, Union

from ems_client.auth.permissions import (
    can_cancel_leave,
    can_review_leave,
    has_permission,
)
from ems_client.auth.schemas import SessionUser
from ems_client.common.constants import LEAVE_TRANSITIONS, LeaveStatus, UserRole
from ems_client.common.exceptions import (
    AppException,
    ForbiddenException,
    InvalidTransitionError,
    ValidationException,
    required_fields_error,
)
from ems_client.common.view import ViewController
from ems_client.config import settings
from ems_client.core_hr.client import EmployeeApi
from ems_client.core_hr.schemas import Employee
from ems_client.leave.client import LeaveApi
from ems_client.leave.schemas import (
    LeaveApplication,
    LeaveFilter,
    LeaveRequestCreate,
    LeaveRequestOut,
)

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 24 * 60 * 60

LeaveRef = Union[LeaveRequestOut, int]


# ── Pure helpers ────────────────────────────────────────────────────

def compute_total_days(start_date: date, end_date: date) -> int:
    """Inclusive day count: ``ceil(|end - start| in days) + 1``."""
    seconds = abs((end_date - start_date).total_seconds())
    return math.ceil(seconds / _SECONDS_PER_DAY) + 1


def ensure_transition(current: LeaveStatus, target: LeaveStatus) -> None:
    """Raise InvalidTransitionError unless ``current → target`` is allowed."""
    if target not in LEAVE_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransitionError(current.value, target.value)


# ═════════════════════════════════════════════════════════════════════
# LeaveWorkflow
# ═════════════════════════════════════════════════════════════════════


class LeaveWorkflow(ViewController):
    """Leave screen controller bound to one session."""

    def __init__(
        self,
        session: Optional[SessionUser],
        leaves: LeaveApi,
        employees: EmployeeApi,
        *,
        use_aggregate_endpoint: Optional[bool] = None,
    ) -> None:
        super().__init__(session)
        self._leaves = leaves
        self._employees = employees
        self._use_aggregate_endpoint = (
            settings.LEAVE_AGGREGATE_ENDPOINT
            if use_aggregate_endpoint is None
            else use_aggregate_endpoint
        )
        self.filters = LeaveFilter()
        self.leaves: list[LeaveRequestOut] = []
        self.employees: list[Employee] = []

    # ─────────────────────────────────────────────────────────────────
    # Permissions
    # ─────────────────────────────────────────────────────────────────

    @property
    def can_choose_employee(self) -> bool:
        """ADMIN and HR may apply on behalf of any employee."""
        return has_permission(self.session, "leave:apply_for_others")

    @property
    def can_filter_by_employee(self) -> bool:
        return has_permission(self.session, "leave:read_all")

    def can_review(self, leave: LeaveRequestOut) -> bool:
        return can_review_leave(self.session, leave.employee_id)

    def can_cancel(self, leave: LeaveRequestOut) -> bool:
        return can_cancel_leave(self.session, leave.employee_id, leave.status)

    # ─────────────────────────────────────────────────────────────────
    # Listing
    # ─────────────────────────────────────────────────────────────────

    async def set_filters(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[int] = None,
    ) -> list[LeaveRequestOut]:
        """Replace both filters and refetch."""
        own_id = self.session.employee_id if self.session else None
        if (
            employee_id is not None
            and employee_id != own_id
            and not self.can_filter_by_employee
        ):
            raise ForbiddenException("You can only view your own leave requests.")
        self.filters = LeaveFilter(status=status, employee_id=employee_id)
        return await self.refresh()

    async def refresh(self) -> list[LeaveRequestOut]:
        """Refetch employees and the leave list for the current filters."""
        try:
            current, result = await self._load(self._fetch)
        except AppException as exc:
            logger.error("Error fetching leave data: %s", exc)
            raise
        if current and result is not None:
            self.employees, self.leaves = result
        return self.leaves

    async def _fetch(self) -> tuple[list[Employee], list[LeaveRequestOut]]:
        employees = await self._employees.list()
        return employees, await self._fetch_leaves(employees)

    async def _fetch_leaves(self, employees: list[Employee]) -> list[LeaveRequestOut]:
        status = self.filters.status
        employee_id = self.filters.employee_id

        if employee_id is None and self._has_role(UserRole.USER):
            # Plain users default to their own requests
            employee_id = self.session.employee_id if self.session else None
            if employee_id is None:
                return []
            self.filters.employee_id = employee_id

        if employee_id is not None:
            leaves = await self._leaves.list_by_employee(employee_id)
            if status is not None:
                leaves = [leave for leave in leaves if leave.status == status]
            return leaves

        if status is not None:
            return await self._leaves.list_by_status(status)

        return await self._fetch_all_leaves(employees)

    async def _fetch_all_leaves(self, employees: list[Employee]) -> list[LeaveRequestOut]:
        if self._use_aggregate_endpoint:
            return await self._leaves.list_all()

        # One request per employee, merged in employee order
        combined: list[LeaveRequestOut] = []
        for employee in employees:
            combined.extend(await self._leaves.list_by_employee(employee.employee_id))
        return combined

    # ─────────────────────────────────────────────────────────────────
    # Apply
    # ─────────────────────────────────────────────────────────────────

    async def apply(self, application: LeaveApplication) -> Any:
        """Validate, compute the day count and submit as PENDING."""
        own_id = self.session.employee_id if self.session else None
        employee_id = application.employee_id or own_id

        if (
            employee_id is not None
            and employee_id != own_id
            and not self.can_choose_employee
        ):
            raise ForbiddenException("You can only apply for leave for yourself.")

        reason = (application.reason or "").strip()
        missing = [
            name
            for name, value in (
                ("employee_id", employee_id),
                ("start_date", application.start_date),
                ("end_date", application.end_date),
                ("leave_type", application.leave_type),
                ("reason", reason),
            )
            if not value
        ]
        if missing:
            raise required_fields_error(missing)

        if application.end_date < application.start_date:
            raise ValidationException(
                {"end_date": ["End date cannot be before the start date."]},
            )

        payload = LeaveRequestCreate(
            employee_id=employee_id,
            start_date=application.start_date,
            end_date=application.end_date,
            total_days=compute_total_days(application.start_date, application.end_date),
            leave_type=application.leave_type,
            reason=reason,
        )
        result = await self._leaves.apply(payload)
        logger.info(
            "Leave request submitted for employee %s (%s, %d day(s))",
            employee_id, payload.leave_type.value, payload.total_days,
        )
        await self._refresh_after_change()
        return result

    # ─────────────────────────────────────────────────────────────────
    # Approve / Reject / Cancel
    # ─────────────────────────────────────────────────────────────────

    async def approve(self, leave: LeaveRef) -> Any:
        return await self._review(leave, LeaveStatus.APPROVED)

    async def reject(self, leave: LeaveRef) -> Any:
        return await self._review(leave, LeaveStatus.REJECTED)

    async def cancel(self, leave: LeaveRef) -> Any:
        """Withdraw one's own PENDING request."""
        leave = await self._resolve(leave)
        own_id = self.session.employee_id if self.session else None
        if own_id is None or own_id != leave.employee_id:
            raise ForbiddenException("You can only cancel your own leave requests.")
        ensure_transition(leave.status, LeaveStatus.CANCELLED)

        result = await self._leaves.cancel(leave.leave_id)
        logger.info("Leave %s cancelled by employee %s", leave.leave_id, own_id)
        await self._refresh_after_change()
        return result

    async def _review(self, leave: LeaveRef, target: LeaveStatus) -> Any:
        leave = await self._resolve(leave)
        action = "approve" if target == LeaveStatus.APPROVED else "reject"
        if not self.can_review(leave):
            raise ForbiddenException(
                f"You are not authorized to {action} this leave request."
            )
        approver_id = self.session.employee_id if self.session else None
        if approver_id is None:
            raise required_fields_error(
                ["approver_id"], "An approver linked to an employee is required",
            )
        ensure_transition(leave.status, target)

        if target == LeaveStatus.APPROVED:
            result = await self._leaves.approve(leave.leave_id, approver_id)
        else:
            result = await self._leaves.reject(leave.leave_id, approver_id)
        logger.info(
            "Leave %s %s by employee %s", leave.leave_id, target.value.lower(), approver_id,
        )
        await self._refresh_after_change()
        return result

    async def _resolve(self, leave: LeaveRef) -> LeaveRequestOut:
        if isinstance(leave, LeaveRequestOut):
            return leave
        for known in self.leaves:
            if known.leave_id == leave:
                return known
        return await self._leaves.get(leave)
