"""Authenticated request client — bearer token attachment and response normalization.

The token is read from durable storage on every call, so a login or logout
done elsewhere takes effect on the next request without rebuilding the client.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from ems_client.common.constants import GENERIC_ERROR_MESSAGE, SESSION_STORAGE_KEY
from ems_client.common.exceptions import ApiError
from ems_client.common.schemas import to_payload
from ems_client.common.storage import FileStorage
from ems_client.config import settings

logger = logging.getLogger(__name__)


def read_stored_token(storage: FileStorage) -> Optional[str]:
    """Return the bearer token of the stored session, if any."""
    raw = storage.get_item(SESSION_STORAGE_KEY)
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    token = data.get("token")
    return token if isinstance(token, str) and token else None


def _error_message(text: str) -> str:
    """Pull a human-readable message out of an error body."""
    if not text:
        return GENERIC_ERROR_MESSAGE
    try:
        body = json.loads(text)
    except json.JSONDecodeError:
        return GENERIC_ERROR_MESSAGE
    if not isinstance(body, dict):
        return GENERIC_ERROR_MESSAGE
    for key in ("message", "detail", "error"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return GENERIC_ERROR_MESSAGE


def handle_response(response: httpx.Response) -> Any:
    """Return parsed JSON for 2xx responses, raise ApiError otherwise.

    An empty success body parses as ``{}``.
    """
    text = response.text
    request = response.request
    if not response.is_success:
        message = _error_message(text)
        logger.error(
            "%s %s -> %s: %s",
            request.method, request.url.path, response.status_code, message,
        )
        raise ApiError(message, status_code=response.status_code)

    if not text.strip():
        return {}
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.warning(
            "%s %s returned a non-JSON body; treating it as empty",
            request.method, request.url.path,
        )
        return {}


class ApiClient:
    """Thin async wrapper over a pooled ``httpx.AsyncClient``."""

    def __init__(
        self,
        storage: FileStorage,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.storage = storage
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── HTTP ──────────────────────────────────────────────────────────

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        body: Any = None,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """Send one request and return its parsed JSON body."""
        request_headers: dict[str, str] = {}
        token = read_stored_token(self.storage)
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        if headers:
            request_headers.update(headers)

        try:
            response = await self._client.request(
                method,
                endpoint,
                json=to_payload(body) if body is not None else None,
                params=params,
                headers=request_headers,
            )
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, endpoint, exc)
            raise ApiError(GENERIC_ERROR_MESSAGE) from exc

        return handle_response(response)

    async def get(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("POST", endpoint, **kwargs)

    async def put(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("PUT", endpoint, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", endpoint, **kwargs)
