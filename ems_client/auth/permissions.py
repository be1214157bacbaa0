"""Role gates: permission lookups and the leave approval rules."""

from __future__ import annotations

from typing import Optional

from ems_client.auth.schemas import SessionUser
from ems_client.common.constants import PERMISSIONS, LeaveStatus, UserRole
from ems_client.common.exceptions import ForbiddenException


def has_permission(session: Optional[SessionUser], permission: str) -> bool:
    """True when the session's role grants ``permission``."""
    if session is None:
        return False
    return permission in PERMISSIONS.get(session.role, [])


def require_permission(session: Optional[SessionUser], permission: str) -> SessionUser:
    """Return the session, or raise ForbiddenException."""
    if session is None:
        raise ForbiddenException("You must be logged in to perform this action.")
    if not has_permission(session, permission):
        raise ForbiddenException(
            f"Permission '{permission}' is not granted to role '{session.role.value}'.",
        )
    return session


def can_review_leave(session: Optional[SessionUser], leave_employee_id: int) -> bool:
    """ADMIN and HR may review any request; a MANAGER may not review their own."""
    if session is None:
        return False
    if session.role in (UserRole.ADMIN, UserRole.HR):
        return True
    if session.role == UserRole.MANAGER:
        return session.employee_id != leave_employee_id
    return False


def can_cancel_leave(
    session: Optional[SessionUser],
    leave_employee_id: int,
    status: LeaveStatus,
) -> bool:
    """Only the requesting employee may cancel, and only while PENDING."""
    if session is None or session.employee_id is None:
        return False
    return session.employee_id == leave_employee_id and status == LeaveStatus.PENDING
