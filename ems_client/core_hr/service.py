"""Employee and department directory controllers.

Listing is open to every role; changes go through a role gate:
  - employees: any role except USER
  - departments: ADMIN and HR
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ems_client.auth.permissions import has_permission, require_permission
from ems_client.auth.schemas import SessionUser
from ems_client.common.constants import EmployeeStatus
from ems_client.common.exceptions import AppException
from ems_client.common.view import ViewController
from ems_client.core_hr.client import DepartmentApi, EmployeeApi, Payload
from ems_client.core_hr.schemas import Department, Employee

logger = logging.getLogger(__name__)


def _matches(word: str, *values: Optional[str]) -> bool:
    return any(word in (value or "").lower() for value in values)


# ═════════════════════════════════════════════════════════════════════
# Employees
# ═════════════════════════════════════════════════════════════════════


class EmployeeDirectory(ViewController):
    """Employee list with department/status/search filtering."""

    def __init__(
        self,
        session: Optional[SessionUser],
        employees: EmployeeApi,
        departments: DepartmentApi,
    ) -> None:
        super().__init__(session)
        self._employees = employees
        self._departments = departments
        self.employees: list[Employee] = []
        self.departments: list[Department] = []

    @property
    def can_manage(self) -> bool:
        return has_permission(self.session, "employee:manage")

    async def refresh(self) -> list[Employee]:
        return await self.apply_filter()

    async def apply_filter(
        self,
        *,
        department_id: Optional[int] = None,
        status: Optional[EmployeeStatus] = None,
        search: Optional[str] = None,
    ) -> list[Employee]:
        """Fetch by department (or all), then narrow by status and search text."""

        async def fetch() -> tuple[list[Department], list[Employee]]:
            departments = await self._departments.list()
            if department_id is not None:
                employees = await self._employees.list_by_department(department_id)
            else:
                employees = await self._employees.list()
            return departments, employees

        try:
            current, result = await self._load(fetch)
        except AppException as exc:
            logger.error("Error fetching employees: %s", exc)
            raise
        if not current or result is None:
            return self.employees

        departments, employees = result
        if status is not None:
            wanted = EmployeeStatus(status).value
            employees = [emp for emp in employees if emp.status == wanted]
        if search:
            word = search.lower()
            employees = [
                emp for emp in employees
                if _matches(word, emp.first_name, emp.last_name, emp.email, emp.job_title)
            ]
        self.departments, self.employees = departments, employees
        return self.employees

    # -- changes -------------------------------------------------------------

    async def create(self, data: Payload) -> Employee:
        require_permission(self.session, "employee:manage")
        employee = await self._employees.create(data)
        logger.info("Employee %s created", employee.employee_id)
        return employee

    async def update(self, employee_id: int, data: Payload) -> Employee:
        require_permission(self.session, "employee:manage")
        return await self._employees.update(employee_id, data)

    async def delete(self, employee_id: int) -> None:
        """Delete and drop the employee from the local list."""
        require_permission(self.session, "employee:manage")
        await self._employees.delete(employee_id)
        self.employees = [emp for emp in self.employees if emp.employee_id != employee_id]
        logger.info("Employee %s deleted", employee_id)

    async def assign_department(self, employee_id: int, department_id: int) -> Any:
        require_permission(self.session, "employee:manage")
        return await self._employees.assign_department(employee_id, department_id)

    async def assign_manager(self, employee_id: int, manager_id: int) -> Any:
        require_permission(self.session, "employee:manage")
        return await self._employees.assign_manager(employee_id, manager_id)

    async def update_status(self, employee_id: int, status: EmployeeStatus) -> Any:
        require_permission(self.session, "employee:manage")
        return await self._employees.update_status(employee_id, status)


# ═════════════════════════════════════════════════════════════════════
# Departments
# ═════════════════════════════════════════════════════════════════════


class DepartmentDirectory(ViewController):
    """Department cards with head counts and name/location search."""

    def __init__(
        self,
        session: Optional[SessionUser],
        departments: DepartmentApi,
        employees: EmployeeApi,
    ) -> None:
        super().__init__(session)
        self._departments = departments
        self._employees = employees
        self.departments: list[Department] = []
        self.employees: list[Employee] = []

    @property
    def can_manage(self) -> bool:
        return has_permission(self.session, "department:manage")

    async def refresh(self) -> list[Department]:
        async def fetch() -> tuple[list[Department], list[Employee]]:
            return await self._departments.list(), await self._employees.list()

        try:
            current, result = await self._load(fetch)
        except AppException as exc:
            logger.error("Error fetching departments: %s", exc)
            raise
        if current and result is not None:
            self.departments, self.employees = result
        return self.departments

    def search(self, word: str) -> list[Department]:
        word = (word or "").lower()
        return [
            dept for dept in self.departments
            if _matches(word, dept.department_name, dept.location)
        ]

    def employee_count(self, department_id: int) -> int:
        return sum(1 for emp in self.employees if emp.department_id == department_id)

    # -- changes -------------------------------------------------------------

    async def create(self, data: Payload) -> Department:
        require_permission(self.session, "department:manage")
        department = await self._departments.create(data)
        logger.info("Department %s created", department.department_id)
        return department

    async def update(self, department_id: int, data: Payload) -> Department:
        require_permission(self.session, "department:manage")
        return await self._departments.update(department_id, data)

    async def delete(self, department_id: int) -> None:
        require_permission(self.session, "department:manage")
        await self._departments.delete(department_id)
        self.departments = [
            dept for dept in self.departments if dept.department_id != department_id
        ]
        logger.info("Department %s deleted", department_id)

    async def assign_manager(self, department_id: int, manager_id: int) -> Any:
        require_permission(self.session, "department:manage")
        return await self._departments.assign_manager(department_id, manager_id)
