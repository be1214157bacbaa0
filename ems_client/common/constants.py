"""Enums and constants for the EMS client — matching the backend's wire values."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    HR = "HR"
    MANAGER = "MANAGER"
    USER = "USER"


# ── Employee ────────────────────────────────────────────────────────

class EmployeeStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    ON_LEAVE = "ON_LEAVE"
    INACTIVE = "INACTIVE"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class LeaveType(str, enum.Enum):
    ANNUAL = "ANNUAL"
    SICK = "SICK"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"
    PERSONAL = "PERSONAL"
    UNPAID = "UNPAID"
    OTHER = "OTHER"


# PENDING is the only non-terminal state
LEAVE_TRANSITIONS: dict[LeaveStatus, frozenset[LeaveStatus]] = {
    LeaveStatus.PENDING: frozenset(
        {LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED}
    ),
    LeaveStatus.APPROVED: frozenset(),
    LeaveStatus.REJECTED: frozenset(),
    LeaveStatus.CANCELLED: frozenset(),
}


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceMark(str, enum.Enum):
    IN = "IN"
    OUT = "OUT"
    ABSENT = "ABSENT"


class AttendanceDisplayStatus(str, enum.Enum):
    WORKING = "Working"
    PRESENT = "Present"
    ABSENT = "Absent"


# ── Role-based permissions ──────────────────────────────────────────

PERMISSIONS: dict[UserRole, list[str]] = {
    UserRole.USER: [
        "leave:request",
        "leave:read_own",
        "attendance:read",
    ],
    UserRole.MANAGER: [
        "leave:request",
        "leave:read_own",
        "leave:read_all",
        "leave:approve",
        "leave:reject",
        "attendance:read",
        "employee:manage",
    ],
    UserRole.HR: [
        "leave:request",
        "leave:read_own",
        "leave:read_all",
        "leave:apply_for_others",
        "leave:approve",
        "leave:reject",
        "attendance:read",
        "attendance:mark",
        "employee:manage",
        "department:manage",
    ],
    UserRole.ADMIN: [
        "leave:request",
        "leave:read_own",
        "leave:read_all",
        "leave:apply_for_others",
        "leave:approve",
        "leave:reject",
        "attendance:read",
        "attendance:mark",
        "employee:manage",
        "department:manage",
    ],
}

# ── Misc constants ──────────────────────────────────────────────────

SESSION_STORAGE_KEY = "user"
DATE_FORMAT = "%Y-%m-%d"
GENERIC_ERROR_MESSAGE = "An error occurred"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials. Please try again"
