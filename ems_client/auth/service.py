"""Session store — login, logout and hydration of the persisted identity."""

from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import ValidationError

from ems_client.auth.schemas import LoginRequest, SessionUser
from ems_client.common.constants import SESSION_STORAGE_KEY, UserRole
from ems_client.common.exceptions import (
    ApiError,
    InvalidCredentialsError,
    required_fields_error,
)
from ems_client.common.http import ApiClient

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds the current session in memory, mirrored to durable storage.

    ``loading`` stays True until :meth:`hydrate` has run, and while a login
    is in flight.
    """

    def __init__(self, api: ApiClient) -> None:
        self._api = api
        self._storage = api.storage
        self.session: Optional[SessionUser] = None
        self.loading = True

    # ── State ─────────────────────────────────────────────────────────

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    @property
    def role(self) -> Optional[UserRole]:
        return self.session.role if self.session else None

    @property
    def employee_id(self) -> Optional[int]:
        return self.session.employee_id if self.session else None

    # ── Lifecycle ─────────────────────────────────────────────────────

    def hydrate(self) -> Optional[SessionUser]:
        """Restore the session saved by a previous run.

        A stored value that cannot be parsed is dropped and treated as
        "not logged in".
        """
        raw = self._storage.get_item(SESSION_STORAGE_KEY)
        if raw:
            try:
                self.session = SessionUser.model_validate(json.loads(raw))
            except (json.JSONDecodeError, ValidationError) as exc:
                logger.warning("Discarding unreadable stored session: %s", exc)
                self._storage.remove_item(SESSION_STORAGE_KEY)
                self.session = None
        self.loading = False
        return self.session

    async def login(self, username: str, password: str) -> SessionUser:
        """Authenticate and persist the returned identity.

        On any failure the previous session, in memory and on disk, is left
        as it was.
        """
        missing = [
            name for name, value in (("username", username), ("password", password))
            if not value
        ]
        if missing:
            raise required_fields_error(missing, "Username and password are required")

        self.loading = True
        try:
            data = await self._api.post(
                "/users/login",
                body=LoginRequest(username=username, password=password),
            )
            session = SessionUser.model_validate(data)
        except ApiError as exc:
            logger.info("Login failed for %s: %s", username, exc.detail)
            raise InvalidCredentialsError(status_code=exc.status_code) from exc
        except ValidationError as exc:
            logger.error("Login response for %s was malformed: %s", username, exc)
            raise InvalidCredentialsError() from exc
        finally:
            self.loading = False

        self._storage.set_item(
            SESSION_STORAGE_KEY,
            json.dumps(session.model_dump(by_alias=True, mode="json")),
        )
        self.session = session
        logger.info("Logged in as %s (%s)", session.user_name, session.role.value)
        return session

    def logout(self) -> None:
        """Forget the session everywhere. Never raises."""
        self.session = None
        try:
            self._storage.remove_item(SESSION_STORAGE_KEY)
        except OSError as exc:
            logger.warning("Could not clear stored session: %s", exc)
