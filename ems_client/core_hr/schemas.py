"""Core HR pydantic v2 schemas — employees, departments, users.

Naming conventions:
  - plain name        → records read from the backend
  - *Create / *Update → request bodies (write)
  - *Brief            → compact embedded representations
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import EmailStr, Field

from ems_client.common.constants import EmployeeStatus, UserRole
from ems_client.common.schemas import WireModel


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class EmployeeBrief(WireModel):
    """Minimal employee info embedded in other records."""

    employee_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(EmployeeBrief):
    """Full employee record."""

    email: Optional[str] = None
    contact_no: Optional[str] = None
    hired_date: Optional[date] = None
    job_title: Optional[str] = None
    salary: Optional[float] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    status: Optional[str] = None
    department: Optional[Department] = None
    manager: Optional[Employee] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def department_id(self) -> Optional[int]:
        return self.department.department_id if self.department else None


class EmployeeCreate(WireModel):
    """Payload for creating or replacing an employee."""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    contact_no: Optional[str] = None
    hired_date: Optional[date] = None
    job_title: Optional[str] = None
    salary: Optional[float] = Field(None, ge=0)
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE


# ═════════════════════════════════════════════════════════════════════
# Department
# ═════════════════════════════════════════════════════════════════════


class Department(WireModel):
    department_id: int
    department_name: Optional[str] = None
    location: Optional[str] = None
    manager: Optional[Employee] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DepartmentCreate(WireModel):
    department_name: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)


# ═════════════════════════════════════════════════════════════════════
# User accounts
# ═════════════════════════════════════════════════════════════════════


class User(WireModel):
    user_id: int
    username: str
    email: Optional[str] = None
    role: UserRole = UserRole.USER
    status: Optional[str] = None
    employee: Optional[Employee] = None


class UserRegister(WireModel):
    """Payload for ``POST /users/register``."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    email: EmailStr
    role: UserRole = UserRole.USER


Employee.model_rebuild()
Department.model_rebuild()
User.model_rebuild()
