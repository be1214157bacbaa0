"""Domain client for ``/attendance``."""

from __future__ import annotations

from datetime import date
from typing import Any

from ems_client.common.constants import DATE_FORMAT
from ems_client.common.http import ApiClient
from ems_client.common.schemas import parse_list, parse_one
from ems_client.attendance.schemas import AttendanceRecordOut

__all__ = ["AttendanceApi"]


class AttendanceApi:
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def list(self) -> list[AttendanceRecordOut]:
        return parse_list(AttendanceRecordOut, await self._api.get("/attendance"))

    async def get(self, attendance_id: int) -> AttendanceRecordOut:
        data = await self._api.get(f"/attendance/{attendance_id}")
        return parse_one(AttendanceRecordOut, data)

    async def list_by_employee(self, employee_id: int) -> list[AttendanceRecordOut]:
        data = await self._api.get(f"/attendance/employee/{employee_id}")
        return parse_list(AttendanceRecordOut, data)

    async def clock_in(self, employee_id: int) -> Any:
        return await self._api.post(f"/attendance/employee/{employee_id}/clock-in")

    async def clock_out(self, employee_id: int) -> Any:
        return await self._api.post(f"/attendance/employee/{employee_id}/clock-out")

    async def mark_absent(self, employee_id: int, day: date) -> Any:
        return await self._api.post(
            f"/attendance/employee/{employee_id}/mark-absent",
            params={"date": day.strftime(DATE_FORMAT)},
        )
