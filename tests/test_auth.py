"""Session store tests."""

from __future__ import annotations

import json

import pytest

from ems_client.auth.permissions import (
    can_cancel_leave,
    can_review_leave,
    has_permission,
    require_permission,
)
from ems_client.auth.schemas import SessionUser
from ems_client.auth.service import SessionStore
from ems_client.common.constants import (
    INVALID_CREDENTIALS_MESSAGE,
    SESSION_STORAGE_KEY,
    LeaveStatus,
    UserRole,
)
from ems_client.common.exceptions import (
    ForbiddenException,
    InvalidCredentialsError,
    ValidationException,
)


def _session(role: UserRole, employee_id: int | None = 10) -> SessionUser:
    employee = {"employeeId": employee_id} if employee_id is not None else None
    return SessionUser.model_validate(
        {"userId": 1, "userName": "someone", "role": role.value, "employee": employee}
    )


# ═════════════════════════════════════════════════════════════════════
# LOGIN / LOGOUT
# ═════════════════════════════════════════════════════════════════════


class TestLogin:

    async def test_login_success_persists_session(self, store: SessionStore, storage):
        session = await store.login("uma", "uma123")

        assert store.is_authenticated
        assert session.user_name == "uma"
        assert session.role == UserRole.USER
        assert session.employee_id == 4
        assert session.token

        stored = json.loads(storage.get_item(SESSION_STORAGE_KEY))
        assert stored["userName"] == "uma"
        assert stored["token"] == session.token
        assert stored["employee"]["employeeId"] == 4

    async def test_login_clears_loading_flag(self, store: SessionStore):
        await store.login("admin", "admin123")
        assert store.loading is False

    async def test_invalid_credentials_leave_state_untouched(self, store: SessionStore, storage):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await store.login("uma", "wrong")

        assert exc_info.value.detail == INVALID_CREDENTIALS_MESSAGE
        assert exc_info.value.status_code == 401
        assert store.session is None
        assert not store.is_authenticated
        assert storage.get_item(SESSION_STORAGE_KEY) is None
        assert store.loading is False

    async def test_failed_login_keeps_previous_session(self, store: SessionStore, storage):
        await store.login("admin", "admin123")
        before = storage.get_item(SESSION_STORAGE_KEY)

        with pytest.raises(InvalidCredentialsError):
            await store.login("hr", "nope")

        assert store.session.user_name == "admin"
        assert storage.get_item(SESSION_STORAGE_KEY) == before

    async def test_missing_credentials_rejected_without_request(self, store: SessionStore, backend):
        with pytest.raises(ValidationException) as exc_info:
            await store.login("", "")
        assert set(exc_info.value.errors) == {"username", "password"}
        assert backend.requests == []

    @pytest.mark.parametrize("role", [None, "EMPLOYEE"])
    async def test_unusable_role_is_rejected(self, store: SessionStore, storage, backend, caplog, role):
        backend.users["uma"]["role"] = role

        with pytest.raises(InvalidCredentialsError):
            await store.login("uma", "uma123")

        assert store.session is None
        assert storage.get_item(SESSION_STORAGE_KEY) is None
        assert "Login response for uma was malformed" in caplog.text

    async def test_missing_role_is_rejected(self, store: SessionStore, backend):
        del backend.users["uma"]["role"]
        with pytest.raises(InvalidCredentialsError):
            await store.login("uma", "uma123")
        assert store.session is None

    async def test_logout_clears_memory_and_storage(self, store: SessionStore, storage):
        await store.login("hr", "hr123")
        store.logout()
        assert store.session is None
        assert not store.is_authenticated
        assert storage.get_item(SESSION_STORAGE_KEY) is None

    async def test_logout_without_session_does_not_fail(self, store: SessionStore):
        store.logout()
        assert not store.is_authenticated

    async def test_requests_after_login_carry_token(self, store: SessionStore, api, backend):
        session = await store.login("admin", "admin123")
        await api.get("/employee")
        assert backend.auth_headers[-1] == f"Bearer {session.token}"


# ═════════════════════════════════════════════════════════════════════
# HYDRATION
# ═════════════════════════════════════════════════════════════════════


class TestHydrate:

    def test_loading_until_hydrated(self, api):
        fresh = SessionStore(api)
        assert fresh.loading is True
        fresh.hydrate()
        assert fresh.loading is False

    async def test_hydrate_restores_previous_login(self, store: SessionStore, api):
        await store.login("manager", "manager123")

        restarted = SessionStore(api)
        restarted.hydrate()

        assert restarted.is_authenticated
        assert restarted.role == UserRole.MANAGER
        assert restarted.employee_id == 3

    def test_corrupt_stored_session_is_discarded(self, api, storage):
        storage.set_item(SESSION_STORAGE_KEY, "{this is not json")

        fresh = SessionStore(api)
        assert fresh.hydrate() is None

        assert fresh.is_authenticated is False
        assert storage.get_item(SESSION_STORAGE_KEY) is None

    def test_stored_session_with_wrong_shape_is_discarded(self, api, storage):
        storage.set_item(SESSION_STORAGE_KEY, json.dumps({"role": "ADMIN"}))

        fresh = SessionStore(api)
        fresh.hydrate()

        assert fresh.is_authenticated is False

    def test_no_stored_session(self, api):
        fresh = SessionStore(api)
        fresh.hydrate()
        assert fresh.session is None
        assert fresh.role is None
        assert fresh.employee_id is None


# ═════════════════════════════════════════════════════════════════════
# ROLE GATES
# ═════════════════════════════════════════════════════════════════════


class TestPermissions:

    def test_has_permission_by_role(self):
        assert has_permission(_session(UserRole.HR), "attendance:mark")
        assert not has_permission(_session(UserRole.MANAGER), "attendance:mark")
        assert not has_permission(None, "leave:read_own")

    def test_department_management_is_admin_and_hr(self):
        assert has_permission(_session(UserRole.ADMIN), "department:manage")
        assert has_permission(_session(UserRole.HR), "department:manage")
        assert not has_permission(_session(UserRole.MANAGER), "department:manage")
        assert not has_permission(_session(UserRole.USER), "department:manage")

    def test_require_permission_raises(self):
        with pytest.raises(ForbiddenException):
            require_permission(_session(UserRole.USER), "employee:manage")
        with pytest.raises(ForbiddenException):
            require_permission(None, "employee:manage")

    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.HR])
    def test_admin_and_hr_review_anything(self, role):
        assert can_review_leave(_session(role, employee_id=10), 10)
        assert can_review_leave(_session(role, employee_id=10), 11)

    def test_manager_cannot_review_own_leave(self):
        manager = _session(UserRole.MANAGER, employee_id=10)
        assert can_review_leave(manager, 11)
        assert not can_review_leave(manager, 10)

    def test_user_cannot_review(self):
        assert not can_review_leave(_session(UserRole.USER), 11)

    def test_cancel_only_own_pending(self):
        user = _session(UserRole.USER, employee_id=10)
        assert can_cancel_leave(user, 10, LeaveStatus.PENDING)
        assert not can_cancel_leave(user, 11, LeaveStatus.PENDING)
        for status in (LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED):
            assert not can_cancel_leave(user, 10, status)

    def test_cancel_requires_linked_employee(self):
        assert not can_cancel_leave(_session(UserRole.ADMIN, employee_id=None), 10, LeaveStatus.PENDING)
