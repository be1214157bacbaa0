"""Base for controllers that own a fetched view of server data."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ems_client.auth.schemas import SessionUser
from ems_client.common.constants import UserRole
from ems_client.common.exceptions import AppException

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ViewController:
    """Holds the session it acts for, a loading flag and a refresh generation.

    Every refresh bumps the generation; a response that arrives after a newer
    refresh started is dropped instead of overwriting the newer state.

    ``stale`` is set when a change was saved but the refetch that should
    follow it failed; the next successful refresh clears it.
    """

    def __init__(self, session: Optional[SessionUser]) -> None:
        self.session = session
        self.loading = False
        self.stale = False
        self._generation = 0

    @property
    def role(self) -> Optional[UserRole]:
        return self.session.role if self.session else None

    def _has_role(self, *roles: UserRole) -> bool:
        return self.role in roles

    async def refresh(self) -> Any:
        raise NotImplementedError

    async def _load(self, fetch: Callable[[], Awaitable[T]]) -> tuple[bool, Optional[T]]:
        """Run ``fetch``; returns ``(current, result)``.

        ``current`` is False when a later refresh superseded this one.
        """
        self._generation += 1
        generation = self._generation
        self.loading = True
        try:
            result = await fetch()
        finally:
            if generation == self._generation:
                self.loading = False
        if generation != self._generation:
            logger.debug("%s: dropping superseded refresh #%d", type(self).__name__, generation)
            return False, None
        self.stale = False
        return True, result

    async def _refresh_after_change(self) -> None:
        """Refetch after a committed change.

        The change already happened on the backend, so a failed refetch is
        logged and flagged through ``stale`` instead of being raised.
        """
        try:
            await self.refresh()
        except AppException as exc:
            self.stale = True
            logger.warning(
                "%s: change saved but the refetch failed: %s", type(self).__name__, exc.detail,
            )
