"""Client exception hierarchy.

Everything the client raises on purpose derives from :class:`AppException`,
so front ends can catch one type and show ``exc.detail`` to the user.
"""

from __future__ import annotations

from typing import Any, Optional

from ems_client.common.constants import (
    GENERIC_ERROR_MESSAGE,
    INVALID_CREDENTIALS_MESSAGE,
)


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all client exceptions."""

    def __init__(
        self,
        detail: str,
        *,
        status_code: Optional[int] = None,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.detail = detail
        self.status_code = status_code
        self.errors = errors
        super().__init__(detail)


class ValidationException(AppException):
    """Input rejected before any network call."""

    def __init__(
        self,
        errors: dict[str, list[str]],
        detail: str = "One or more fields failed validation.",
    ) -> None:
        super().__init__(detail, errors=errors)


class InvalidTransitionError(ValidationException):
    """Leave status change that the approval state machine does not allow."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            {"status": [f"Leave request is already {current}."]},
            detail=f"Cannot move a leave request from {current} to {target}.",
        )
        self.current = current
        self.target = target


class ForbiddenException(AppException):
    """The session's role does not allow the action."""

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(detail, status_code=403)


class ApiError(AppException):
    """Non-2xx response or transport failure from the backend."""

    def __init__(
        self,
        detail: str = GENERIC_ERROR_MESSAGE,
        *,
        status_code: Optional[int] = None,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, status_code=status_code, errors=errors)


class InvalidCredentialsError(ApiError):
    """Login refused by the backend."""

    def __init__(self, status_code: Optional[int] = None) -> None:
        super().__init__(INVALID_CREDENTIALS_MESSAGE, status_code=status_code)


# ── Helpers ─────────────────────────────────────────────────────────

def required_fields_error(
    missing: list[str],
    detail: str = "Please fill all required fields",
) -> ValidationException:
    """Build a ValidationException listing each missing field."""
    return ValidationException(
        {name: ["This field is required."] for name in missing},
        detail=detail,
    )
