"""Auth schemas — login payload and the persisted session identity."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field

from ems_client.common.constants import UserRole
from ems_client.common.schemas import WireModel
from ems_client.core_hr.schemas import EmployeeBrief


class LoginRequest(WireModel):
    username: str
    password: str


class SessionUser(WireModel):
    """Identity returned by ``POST /users/login`` and kept in durable storage.

    The backend names the login field ``username``; stored sessions use
    ``userName``. Both are accepted. A response without a known role is
    rejected rather than treated as USER.
    """

    user_id: int
    user_name: str = Field(
        validation_alias=AliasChoices("userName", "username", "user_name"),
        serialization_alias="userName",
    )
    email: Optional[str] = None
    role: UserRole
    status: Optional[str] = None
    employee: Optional[EmployeeBrief] = None
    token: Optional[str] = None

    @property
    def employee_id(self) -> Optional[int]:
        """Linked employee id, or None for accounts without an employee."""
        return self.employee.employee_id if self.employee else None
