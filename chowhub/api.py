"""HTTP client for the ChowHub REST API."""

from __future__ import annotations

import logging
from typing import Any, Callable

import httpx

from chowhub.config import API_BASE_URL, REQUEST_TIMEOUT_SECONDS
from chowhub.session import SessionStore

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Session expired, please log in again."


class ApiError(RuntimeError):
    """A failed API call. ``status`` is None when no response was received."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class SessionExpiredError(ApiError):
    """The API rejected the stored credentials (HTTP 401)."""


class ApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` that applies the session rules.

    Every request carries the bearer token of ``session`` when one is set.
    Any non-2xx response raises ``ApiError``; a 401 additionally clears the
    session and calls ``on_session_expired`` before raising
    ``SessionExpiredError``.
    """

    def __init__(
        self,
        session: SessionStore,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        on_session_expired: Callable[[str], None] | None = None,
    ) -> None:
        self.session = session
        self.on_session_expired = on_session_expired
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        url = path.lstrip("/")
        try:
            response = await self._client.request(method, url, json=json, params=params, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %r", method, path, exc)
            raise ApiError(f"Network error: {exc}") from exc

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}

        if response.is_success:
            logger.debug("%s %s -> %s", method, path, response.status_code)
            return body

        message = body.get("error") if isinstance(body, dict) else None
        message = str(message or "API Error")
        logger.warning("%s %s -> %s %s", method, path, response.status_code, message)

        if response.status_code == 401:
            self.session.clear()
            if self.on_session_expired is not None:
                self.on_session_expired(SESSION_EXPIRED_MESSAGE)
            raise SessionExpiredError(message, status=401)
        raise ApiError(message, status=response.status_code)

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)
