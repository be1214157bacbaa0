"""EMS command-line front end.

Usage:
    ems login --username alice            # prompts for the password
    ems whoami
    ems leave list --status PENDING
    ems leave apply --start 2024-06-10 --end 2024-06-12 --type SICK --reason "Flu"
    ems leave approve 42
    ems attendance list --date 2024-06-10
    ems attendance clock-in 7
    ems employees list --search eng
    ems departments list
    ems logout

Configuration comes from the environment / .env (see ``ems_client.config``).
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, Optional, Sequence

from ems_client.attendance.client import AttendanceApi
from ems_client.attendance.service import AttendanceWorkflow
from ems_client.auth.service import SessionStore
from ems_client.common.constants import EmployeeStatus, LeaveStatus, LeaveType
from ems_client.common.exceptions import AppException
from ems_client.common.http import ApiClient
from ems_client.common.storage import FileStorage
from ems_client.config import settings
from ems_client.core_hr.client import DepartmentApi, EmployeeApi
from ems_client.core_hr.service import DepartmentDirectory, EmployeeDirectory
from ems_client.leave.client import LeaveApi
from ems_client.leave.schemas import LeaveApplication
from ems_client.leave.service import LeaveWorkflow

logger = logging.getLogger("ems")


@dataclass
class Context:
    """Everything a command needs, built once per invocation."""

    store: SessionStore
    employees: EmployeeApi
    departments: DepartmentApi
    attendance: AttendanceApi
    leaves: LeaveApi

    def leave_workflow(self) -> LeaveWorkflow:
        return LeaveWorkflow(self.store.session, self.leaves, self.employees)

    def attendance_workflow(self, day: Optional[date]) -> AttendanceWorkflow:
        return AttendanceWorkflow(
            self.store.session, self.attendance, self.employees, selected_date=day,
        )


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}' (expected YYYY-MM-DD)")


# ── Commands ──────────────────────────────────────────────────────────

async def cmd_login(ctx: Context, args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass("Password: ")
    session = await ctx.store.login(args.username, password)
    print(f"Logged in as {session.user_name} ({session.role.value})")


async def cmd_logout(ctx: Context, args: argparse.Namespace) -> None:
    ctx.store.logout()
    print("Logged out")


async def cmd_whoami(ctx: Context, args: argparse.Namespace) -> None:
    session = ctx.store.session
    if session is None:
        print("Not logged in")
        return
    linked = session.employee_id if session.employee_id is not None else "-"
    print(f"{session.user_name}  role={session.role.value}  employee={linked}")


async def cmd_leave_list(ctx: Context, args: argparse.Namespace) -> None:
    workflow = ctx.leave_workflow()
    leaves = await workflow.set_filters(status=args.status, employee_id=args.employee)
    if not leaves:
        print("No leave requests found for the selected criteria")
        return
    for leave in leaves:
        print(
            f"#{leave.leave_id:<5} {leave.employee.full_name:<24} {leave.leave_type or '-':<10} "
            f"{leave.start_date} → {leave.end_date} ({leave.total_days or '?'}d)  "
            f"{leave.status.value}"
        )


async def cmd_leave_apply(ctx: Context, args: argparse.Namespace) -> None:
    workflow = ctx.leave_workflow()
    await workflow.apply(
        LeaveApplication(
            employee_id=args.employee,
            start_date=args.start,
            end_date=args.end,
            leave_type=args.type,
            reason=args.reason,
        )
    )
    print("Leave request submitted successfully")


def _leave_action(name: str, past: str) -> Callable[[Context, argparse.Namespace], Awaitable[None]]:
    async def _run(ctx: Context, args: argparse.Namespace) -> None:
        workflow = ctx.leave_workflow()
        await getattr(workflow, name)(args.leave_id)
        print(f"Leave request {past} successfully")

    return _run


async def cmd_attendance_list(ctx: Context, args: argparse.Namespace) -> None:
    workflow = ctx.attendance_workflow(args.date)
    workflow.selected_employee = args.employee
    await workflow.refresh()
    rows = workflow.rows()
    if not rows:
        print("No attendance records found for the selected criteria")
        return
    for row in rows:
        print(
            f"{row.employee_name:<24} {row.date}  in={row.clock_in:<5} "
            f"out={row.clock_out:<5} {row.status:<8} {row.working_hours}"
        )


def _attendance_action(name: str, done: str) -> Callable[[Context, argparse.Namespace], Awaitable[None]]:
    async def _run(ctx: Context, args: argparse.Namespace) -> None:
        workflow = ctx.attendance_workflow(getattr(args, "date", None) or date.today())
        await getattr(workflow, name)(args.employee_id)
        print(done)

    return _run


async def cmd_employees_list(ctx: Context, args: argparse.Namespace) -> None:
    directory = EmployeeDirectory(ctx.store.session, ctx.employees, ctx.departments)
    employees = await directory.apply_filter(
        department_id=args.department, status=args.status, search=args.search,
    )
    for emp in employees:
        dept = (emp.department.department_name if emp.department else None) or "-"
        print(f"#{emp.employee_id:<5} {emp.full_name:<24} {emp.job_title or '-':<20} {dept:<16} {emp.status or '-'}")


async def cmd_employees_delete(ctx: Context, args: argparse.Namespace) -> None:
    directory = EmployeeDirectory(ctx.store.session, ctx.employees, ctx.departments)
    await directory.delete(args.employee_id)
    print("Employee deleted")


async def cmd_departments_list(ctx: Context, args: argparse.Namespace) -> None:
    directory = DepartmentDirectory(ctx.store.session, ctx.departments, ctx.employees)
    await directory.refresh()
    for dept in directory.search(args.search or ""):
        count = directory.employee_count(dept.department_id)
        print(
            f"#{dept.department_id:<5} {dept.department_name or '-':<24} "
            f"{dept.location or '-':<16} {count} employee(s)"
        )


# ── Parser ────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ems",
        description="Employee management client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Log in and remember the session")
    p.add_argument("--username", required=True)
    p.add_argument("--password", help="Prompted for when omitted")
    p.set_defaults(func=cmd_login, failure="Invalid credentials. Please try again")

    sub.add_parser("logout", help="Forget the stored session").set_defaults(func=cmd_logout)
    sub.add_parser("whoami", help="Show the stored session").set_defaults(func=cmd_whoami)

    # leave
    leave = sub.add_parser("leave", help="Leave requests").add_subparsers(
        dest="leave_command", required=True,
    )
    p = leave.add_parser("list", help="List leave requests")
    p.add_argument("--status", type=LeaveStatus, choices=[s.value for s in LeaveStatus])
    p.add_argument("--employee", type=int)
    p.set_defaults(func=cmd_leave_list, failure="Error fetching leave data")

    p = leave.add_parser("apply", help="Apply for leave")
    p.add_argument("--employee", type=int, help="ADMIN/HR only; defaults to yourself")
    p.add_argument("--start", type=_parse_date)
    p.add_argument("--end", type=_parse_date)
    p.add_argument("--type", type=LeaveType, choices=[t.value for t in LeaveType], default=LeaveType.ANNUAL)
    p.add_argument("--reason")
    p.set_defaults(func=cmd_leave_apply, failure="Failed to submit leave request")

    for name, past in (("approve", "approved"), ("reject", "rejected"), ("cancel", "cancelled")):
        p = leave.add_parser(name, help=f"{name.capitalize()} a leave request")
        p.add_argument("leave_id", type=int)
        p.set_defaults(func=_leave_action(name, past), failure=f"Failed to {name} leave request")

    # attendance
    att = sub.add_parser("attendance", help="Attendance records").add_subparsers(
        dest="attendance_command", required=True,
    )
    p = att.add_parser("list", help="List attendance for a day")
    p.add_argument("--date", type=_parse_date, default=date.today())
    p.add_argument("--employee", type=int)
    p.set_defaults(func=cmd_attendance_list, failure="Failed to fetch attendance data")

    for name, method, done in (
        ("clock-in", "clock_in", "Clock-in recorded successfully"),
        ("clock-out", "clock_out", "Clock-out recorded successfully"),
        ("absent", "mark_absent", "Absence recorded successfully"),
    ):
        p = att.add_parser(name, help=done.split(" recorded")[0])
        p.add_argument("employee_id", type=int)
        if name == "absent":
            p.add_argument("--date", type=_parse_date)
        p.set_defaults(func=_attendance_action(method, done), failure="Error marking attendance")

    # employees / departments
    emp = sub.add_parser("employees", help="Employee directory").add_subparsers(
        dest="employees_command", required=True,
    )
    p = emp.add_parser("list", help="List employees")
    p.add_argument("--department", type=int)
    p.add_argument("--status", type=EmployeeStatus, choices=[s.value for s in EmployeeStatus])
    p.add_argument("--search")
    p.set_defaults(func=cmd_employees_list, failure="Error fetching employees")

    p = emp.add_parser("delete", help="Delete an employee")
    p.add_argument("employee_id", type=int)
    p.set_defaults(func=cmd_employees_delete, failure="Error deleting employee")

    dept = sub.add_parser("departments", help="Departments").add_subparsers(
        dest="departments_command", required=True,
    )
    p = dept.add_parser("list", help="List departments with head counts")
    p.add_argument("--search")
    p.set_defaults(func=cmd_departments_list, failure="Error fetching departments")

    return parser


# ── Entry point ───────────────────────────────────────────────────────

async def run(args: argparse.Namespace, api: ApiClient) -> int:
    store = SessionStore(api)
    store.hydrate()
    ctx = Context(
        store=store,
        employees=EmployeeApi(api),
        departments=DepartmentApi(api),
        attendance=AttendanceApi(api),
        leaves=LeaveApi(api),
    )
    try:
        await args.func(ctx, args)
    except AppException as exc:
        logger.debug("Command failed", exc_info=True)
        failure = getattr(args, "failure", "Command failed")
        if exc.detail and exc.detail != failure:
            print(f"{failure}: {exc.detail}", file=sys.stderr)
        else:
            print(failure, file=sys.stderr)
        return 1
    return 0


async def _main(args: argparse.Namespace) -> int:
    async with ApiClient(FileStorage(settings.session_path)) as api:
        return await run(args, api)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    return asyncio.run(_main(args))


if __name__ == "__main__":
    sys.exit(main())
