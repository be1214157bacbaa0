"""Common module — shared constants and exceptions for the EMS client."""

from ems_client.common.constants import (
    DATE_FORMAT,
    GENERIC_ERROR_MESSAGE,
    INVALID_CREDENTIALS_MESSAGE,
    LEAVE_TRANSITIONS,
    PERMISSIONS,
    SESSION_STORAGE_KEY,
    AttendanceDisplayStatus,
    AttendanceMark,
    EmployeeStatus,
    LeaveStatus,
    LeaveType,
    UserRole,
)
from ems_client.common.exceptions import (
    ApiError,
    AppException,
    ForbiddenException,
    InvalidCredentialsError,
    InvalidTransitionError,
    ValidationException,
)

__all__ = [
    # Constants / Enums
    "AttendanceDisplayStatus",
    "AttendanceMark",
    "EmployeeStatus",
    "LeaveStatus",
    "LeaveType",
    "UserRole",
    "LEAVE_TRANSITIONS",
    "PERMISSIONS",
    "DATE_FORMAT",
    "GENERIC_ERROR_MESSAGE",
    "INVALID_CREDENTIALS_MESSAGE",
    "SESSION_STORAGE_KEY",
    # Exceptions
    "ApiError",
    "AppException",
    "ForbiddenException",
    "InvalidCredentialsError",
    "InvalidTransitionError",
    "ValidationException",
]
