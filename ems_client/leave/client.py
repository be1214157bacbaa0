"""Domain client for ``/leave``."""

from __future__ import annotations

from typing import Any, Union

from ems_client.common.constants import LeaveStatus
from ems_client.common.http import ApiClient
from ems_client.common.schemas import parse_list, parse_one
from ems_client.leave.schemas import LeaveRequestCreate, LeaveRequestOut

__all__ = ["LeaveApi"]


class LeaveApi:
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    # -- read methods -------------------------------------------------------

    async def get(self, leave_id: int) -> LeaveRequestOut:
        return parse_one(LeaveRequestOut, await self._api.get(f"/leave/{leave_id}"))

    async def list_by_employee(self, employee_id: int) -> list[LeaveRequestOut]:
        data = await self._api.get(f"/leave/employee/{employee_id}")
        return parse_list(LeaveRequestOut, data)

    async def list_by_status(self, status: LeaveStatus) -> list[LeaveRequestOut]:
        data = await self._api.get(f"/leave/status/{LeaveStatus(status).value}")
        return parse_list(LeaveRequestOut, data)

    async def list_all(self) -> list[LeaveRequestOut]:
        """Single aggregation call; only for backends that expose ``GET /leave``."""
        return parse_list(LeaveRequestOut, await self._api.get("/leave"))

    # -- write methods ------------------------------------------------------

    async def apply(self, data: Union[LeaveRequestCreate, dict[str, Any]]) -> Any:
        return await self._api.post("/leave", body=data)

    async def approve(self, leave_id: int, approver_id: int) -> Any:
        return await self._api.put(
            f"/leave/{leave_id}/approve", params={"approverId": approver_id},
        )

    async def reject(self, leave_id: int, reviewer_id: int) -> Any:
        return await self._api.put(
            f"/leave/{leave_id}/reject", params={"reviewerId": reviewer_id},
        )

    async def cancel(self, leave_id: int) -> Any:
        return await self._api.put(f"/leave/{leave_id}/cancel")
