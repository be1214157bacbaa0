"""Shared test fixtures — in-process fake backend, storage, client, login helpers.

The fake backend is a small FastAPI app that mimics the EMS REST surface and
is reached through ``httpx.ASGITransport``, so the real request client runs
end to end without a network.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator, Optional

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from httpx import ASGITransport
from jose import JWTError, jwt

from ems_client.auth.service import SessionStore
from ems_client.common.http import ApiClient
from ems_client.common.storage import FileStorage

JWT_SECRET = "test-secret-for-ci-do-not-use-in-production"
JWT_ALGORITHM = "HS256"


# ── Seed data ───────────────────────────────────────────────────────

def _employee(
    employee_id: int,
    first_name: str,
    last_name: str,
    *,
    department_id: int,
    job_title: str,
    status: str = "ACTIVE",
) -> dict[str, Any]:
    return {
        "employeeId": employee_id,
        "firstName": first_name,
        "lastName": last_name,
        "email": f"{first_name.lower()}@ems.test",
        "jobTitle": job_title,
        "status": status,
        "hiredDate": "2023-01-15",
        "department": {"departmentId": department_id},
    }


def _brief(emp: dict[str, Any]) -> dict[str, Any]:
    return {k: emp[k] for k in ("employeeId", "firstName", "lastName")}


class FakeBackend:
    """In-memory stand-in for the EMS backend, with a request log."""

    def __init__(self) -> None:
        self.now = datetime(2024, 6, 10, 9, 0)
        self.departments: dict[int, dict[str, Any]] = {
            1: {"departmentId": 1, "departmentName": "Engineering", "location": "Pune"},
            2: {"departmentId": 2, "departmentName": "Human Resources", "location": "Mumbai"},
        }
        self.employees: dict[int, dict[str, Any]] = {
            1: _employee(1, "Alice", "Admin", department_id=2, job_title="Administrator"),
            2: _employee(2, "Hannah", "Reyes", department_id=2, job_title="HR Partner"),
            3: _employee(3, "Mark", "Manning", department_id=1, job_title="Engineering Manager"),
            4: _employee(4, "Uma", "Usher", department_id=1, job_title="Software Engineer"),
            5: _employee(5, "Victor", "Vance", department_id=1, job_title="QA Engineer", status="ON_LEAVE"),
        }
        self.users: dict[str, dict[str, Any]] = {}
        for user_id, (username, role, employee_id) in enumerate(
            [
                ("admin", "ADMIN", 1),
                ("hr", "HR", 2),
                ("manager", "MANAGER", 3),
                ("uma", "USER", 4),
                ("orphan", "USER", None),
            ],
            start=1,
        ):
            self.users[username] = {
                "password": f"{username}123",
                "userId": user_id,
                "username": username,
                "email": f"{username}@ems.test",
                "role": role,
                "status": "ACTIVE",
                "employee": _brief(self.employees[employee_id]) if employee_id else None,
            }
        self.leaves: dict[int, dict[str, Any]] = {}
        for leave_id, employee_id, status, start, end in [
            (101, 4, "PENDING", "2024-06-10", "2024-06-12"),
            (102, 3, "PENDING", "2024-06-17", "2024-06-17"),
            (103, 5, "APPROVED", "2024-05-01", "2024-05-03"),
            (104, 4, "REJECTED", "2024-04-01", "2024-04-02"),
        ]:
            self.leaves[leave_id] = {
                "leave_id": leave_id,
                "employee": _brief(self.employees[employee_id]),
                "leaveType": "ANNUAL",
                "startDate": start,
                "endDate": end,
                "totaldays": 1,
                "reason": "Seeded",
                "status": status,
            }
        self.attendance: dict[int, dict[str, Any]] = {
            201: {
                "attendance_id": 201,
                "employee": {"employeeId": 3},
                "date": "2024-06-10",
                "clockIn": "2024-06-10T09:00:00",
                "clockOut": "2024-06-10T17:30:00",
            },
            202: {
                "attendance_id": 202,
                "employee": {"employeeId": 4},
                "date": "2024-06-10T00:00:00",
                "clockIn": "2024-06-10T09:15:00",
            },
            203: {
                "attendance_id": 203,
                "employee": {"employeeId": 5},
                "date": "2024-06-11",
                "status": "ABSENT",
            },
            204: {
                "attendance_id": 204,
                "employee": {"employeeId": 99},
                "date": "2024-06-10",
                "clockIn": "2024-06-10T08:00:00",
                "clockOut": "2024-06-10T12:00:00",
            },
        }
        self.requests: list[tuple[str, str]] = []
        self.auth_headers: list[Optional[str]] = []
        self.leave_submissions: list[dict[str, Any]] = []
        self.review_params: list[dict[str, str]] = []
        # paths that answer 500, to simulate a backend outage
        self.broken: set[str] = set()

    def paths(self, prefix: str = "") -> list[str]:
        return [path for _, path in self.requests if path.startswith(prefix)]

    def _next_id(self, table: dict[int, Any]) -> int:
        return max(table, default=0) + 1


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"message": message})


def create_backend_app(backend: FakeBackend) -> FastAPI:
    app = FastAPI()

    @app.middleware("http")
    async def _record_and_authenticate(request: Request, call_next):
        backend.requests.append((request.method, request.url.path))
        header = request.headers.get("Authorization")
        backend.auth_headers.append(header)
        if request.url.path in backend.broken:
            return _error(500, "Internal server error")
        if request.url.path in ("/users/login", "/public/empty", "/public/broken"):
            return await call_next(request)
        if not header or not header.startswith("Bearer "):
            return _error(401, "Missing or invalid Authorization header.")
        try:
            jwt.decode(header[7:], JWT_SECRET, algorithms=[JWT_ALGORITHM])
        except JWTError:
            return _error(401, "Invalid token.")
        return await call_next(request)

    # -- misc ---------------------------------------------------------------

    @app.get("/public/empty")
    async def empty():
        return Response(status_code=200)

    @app.get("/public/broken")
    async def broken():
        return PlainTextResponse("upstream exploded", status_code=502)

    # -- users --------------------------------------------------------------

    @app.post("/users/login")
    async def login(request: Request):
        body = await request.json()
        user = backend.users.get(body.get("username"))
        if user is None or user["password"] != body.get("password"):
            return _error(401, "Invalid credentials")
        data = {k: v for k, v in user.items() if k != "password"}
        data["token"] = create_access_token(user["userId"], user.get("role"))
        return data

    # -- employees ------------------------------------------------------------

    @app.get("/employee")
    async def list_employees():
        return list(backend.employees.values())

    @app.get("/employee/department/{department_id}")
    async def employees_by_department(department_id: int):
        return [
            emp for emp in backend.employees.values()
            if emp["department"]["departmentId"] == department_id
        ]

    @app.get("/employee/{employee_id}")
    async def get_employee(employee_id: int):
        if employee_id not in backend.employees:
            return _error(404, f"Employee not found with id: {employee_id}")
        return backend.employees[employee_id]

    @app.delete("/employee/{employee_id}")
    async def delete_employee(employee_id: int):
        backend.employees.pop(employee_id, None)
        return Response(status_code=204)

    @app.put("/employee/{employee_id}/status/{status}")
    async def employee_status(employee_id: int, status: str):
        backend.employees[employee_id]["status"] = status
        return backend.employees[employee_id]

    # -- departments ----------------------------------------------------------

    @app.get("/departments")
    async def list_departments():
        return list(backend.departments.values())

    @app.post("/departments")
    async def create_department(request: Request):
        body = await request.json()
        department_id = backend._next_id(backend.departments)
        backend.departments[department_id] = {"departmentId": department_id, **body}
        return backend.departments[department_id]

    @app.delete("/departments/{department_id}")
    async def delete_department(department_id: int):
        backend.departments.pop(department_id, None)
        return Response(status_code=200)

    # -- attendance -----------------------------------------------------------

    @app.get("/attendance")
    async def list_attendance():
        return list(backend.attendance.values())

    @app.get("/attendance/employee/{employee_id}")
    async def attendance_by_employee(employee_id: int):
        return [
            rec for rec in backend.attendance.values()
            if rec["employee"]["employeeId"] == employee_id
        ]

    def _record_for(employee_id: int, day: str) -> dict[str, Any]:
        for rec in backend.attendance.values():
            if rec["employee"]["employeeId"] == employee_id and rec["date"].startswith(day):
                return rec
        attendance_id = backend._next_id(backend.attendance)
        rec = {"attendance_id": attendance_id, "employee": {"employeeId": employee_id}, "date": day}
        backend.attendance[attendance_id] = rec
        return rec

    @app.post("/attendance/employee/{employee_id}/clock-in")
    async def clock_in(employee_id: int):
        rec = _record_for(employee_id, backend.now.date().isoformat())
        rec["clockIn"] = backend.now.isoformat()
        return rec

    @app.post("/attendance/employee/{employee_id}/clock-out")
    async def clock_out(employee_id: int):
        rec = _record_for(employee_id, backend.now.date().isoformat())
        if "clockIn" not in rec:
            return _error(400, "No clock-in found for today")
        rec["clockOut"] = (backend.now + timedelta(hours=8)).isoformat()
        return rec

    @app.post("/attendance/employee/{employee_id}/mark-absent")
    async def mark_absent(employee_id: int, date: str):
        rec = _record_for(employee_id, date)
        rec["status"] = "ABSENT"
        return rec

    # -- leave ----------------------------------------------------------------

    @app.get("/leave")
    async def list_all_leaves():
        return list(backend.leaves.values())

    @app.get("/leave/employee/{employee_id}")
    async def leaves_by_employee(employee_id: int):
        return [
            leave for leave in backend.leaves.values()
            if leave["employee"]["employeeId"] == employee_id
        ]

    @app.get("/leave/status/{status}")
    async def leaves_by_status(status: str):
        return [leave for leave in backend.leaves.values() if leave["status"] == status]

    @app.get("/leave/{leave_id}")
    async def get_leave(leave_id: int):
        if leave_id not in backend.leaves:
            return _error(404, f"Leave not found with id: {leave_id}")
        return backend.leaves[leave_id]

    @app.post("/leave")
    async def apply_leave(request: Request):
        body = await request.json()
        backend.leave_submissions.append(body)
        leave_id = backend._next_id(backend.leaves)
        backend.leaves[leave_id] = {
            "leave_id": leave_id,
            "employee": _brief(backend.employees[body["employeeId"]]),
            "leaveType": body["leaveType"],
            "startDate": body["startDate"],
            "endDate": body["endDate"],
            "totaldays": body["totaldays"],
            "reason": body["reason"],
            "status": body["status"],
        }
        return backend.leaves[leave_id]

    def _transition(leave_id: int, target: str):
        leave = backend.leaves.get(leave_id)
        if leave is None:
            return _error(404, f"Leave not found with id: {leave_id}")
        if leave["status"] != "PENDING":
            return _error(400, f"Leave request is already {leave['status']}")
        leave["status"] = target
        return leave

    @app.put("/leave/{leave_id}/approve")
    async def approve(leave_id: int, request: Request):
        backend.review_params.append(dict(request.query_params))
        return _transition(leave_id, "APPROVED")

    @app.put("/leave/{leave_id}/reject")
    async def reject(leave_id: int, request: Request):
        backend.review_params.append(dict(request.query_params))
        return _transition(leave_id, "REJECTED")

    @app.put("/leave/{leave_id}/cancel")
    async def cancel(leave_id: int):
        return _transition(leave_id, "CANCELLED")

    return app


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(user_id: int, role: Optional[str], expired: bool = False) -> str:
    """Generate a JWT the fake backend accepts."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=24)
    payload = {"sub": str(user_id), "role": role, "exp": exp}
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


# ── Fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def storage(tmp_path) -> FileStorage:
    return FileStorage(tmp_path / "ems" / "session.json")


@pytest.fixture
async def api(backend, storage) -> AsyncGenerator[ApiClient, None]:
    """Real request client wired to the fake backend."""
    async with ApiClient(
        storage,
        base_url="http://test",
        transport=ASGITransport(app=create_backend_app(backend)),
    ) as client:
        yield client


@pytest.fixture
def store(api) -> SessionStore:
    session_store = SessionStore(api)
    session_store.hydrate()
    return session_store


@pytest.fixture
def login_as(store):
    """Log in as one of the seeded users and return the session."""

    async def _login(username: str):
        # Start each login from a clean slate so role switches inside a test work
        store.logout()
        return await store.login(username, f"{username}123")

    return _login
