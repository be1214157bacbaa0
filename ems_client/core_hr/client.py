"""Domain clients for employees, departments and user accounts.

Each client holds an :class:`ApiClient` and delegates all network I/O to it.
"""

from __future__ import annotations

from typing import Any, Union

from ems_client.common.constants import EmployeeStatus, UserRole
from ems_client.common.http import ApiClient
from ems_client.common.schemas import WireModel, parse_list, parse_one
from ems_client.core_hr.schemas import Department, Employee, User, UserRegister

Payload = Union[WireModel, dict[str, Any]]

__all__ = ["EmployeeApi", "DepartmentApi", "UserApi"]


class EmployeeApi:
    """Operations on ``/employee``."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    # -- read methods -------------------------------------------------------

    async def list(self) -> list[Employee]:
        return parse_list(Employee, await self._api.get("/employee"))

    async def get(self, employee_id: int) -> Employee:
        return parse_one(Employee, await self._api.get(f"/employee/{employee_id}"))

    async def list_by_department(self, department_id: int) -> list[Employee]:
        data = await self._api.get(f"/employee/department/{department_id}")
        return parse_list(Employee, data)

    # -- write methods ------------------------------------------------------

    async def create(self, data: Payload) -> Employee:
        return parse_one(Employee, await self._api.post("/employee", body=data))

    async def update(self, employee_id: int, data: Payload) -> Employee:
        result = await self._api.put(f"/employee/{employee_id}", body=data)
        return parse_one(Employee, result)

    async def delete(self, employee_id: int) -> None:
        await self._api.delete(f"/employee/{employee_id}")

    async def assign_department(self, employee_id: int, department_id: int) -> Any:
        return await self._api.put(f"/employee/{employee_id}/department/{department_id}")

    async def assign_manager(self, employee_id: int, manager_id: int) -> Any:
        return await self._api.put(f"/employee/{employee_id}/manager/{manager_id}")

    async def update_status(self, employee_id: int, status: EmployeeStatus) -> Any:
        value = EmployeeStatus(status).value
        return await self._api.put(f"/employee/{employee_id}/status/{value}")


class DepartmentApi:
    """Operations on ``/departments``."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def list(self) -> list[Department]:
        return parse_list(Department, await self._api.get("/departments"))

    async def get(self, department_id: int) -> Department:
        data = await self._api.get(f"/departments/{department_id}")
        return parse_one(Department, data)

    async def list_employees(self, department_id: int) -> list[Employee]:
        data = await self._api.get(f"/departments/{department_id}/employees")
        return parse_list(Employee, data)

    async def create(self, data: Payload) -> Department:
        return parse_one(Department, await self._api.post("/departments", body=data))

    async def update(self, department_id: int, data: Payload) -> Department:
        result = await self._api.put(f"/departments/{department_id}", body=data)
        return parse_one(Department, result)

    async def delete(self, department_id: int) -> None:
        await self._api.delete(f"/departments/{department_id}")

    async def assign_manager(self, department_id: int, manager_id: int) -> Any:
        return await self._api.put(f"/departments/{department_id}/manager/{manager_id}")


class UserApi:
    """Operations on ``/users``."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def list(self) -> list[User]:
        return parse_list(User, await self._api.get("/users"))

    async def get(self, user_id: int) -> User:
        return parse_one(User, await self._api.get(f"/users/{user_id}"))

    async def register(self, data: Union[UserRegister, dict[str, Any]]) -> User:
        return parse_one(User, await self._api.post("/users/register", body=data))

    async def update(self, user_id: int, data: Payload) -> User:
        return parse_one(User, await self._api.put(f"/users/{user_id}", body=data))

    async def delete(self, user_id: int) -> None:
        await self._api.delete(f"/users/{user_id}")

    async def update_status(self, user_id: int, status: str) -> Any:
        return await self._api.put(f"/users/{user_id}/status/{status}")

    async def assign_role(self, user_id: int, role: UserRole) -> Any:
        return await self._api.put(f"/users/{user_id}/role/{UserRole(role).value}")

    async def link_employee(self, user_id: int, employee_id: int) -> Any:
        return await self._api.put(f"/users/{user_id}/employee/{employee_id}")
