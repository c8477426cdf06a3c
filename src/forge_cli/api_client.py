"""Forge REST client with token refresh and a single server-error retry.

Every call goes through one pipeline:

    transport failure -> NetworkUnreachableError (never retried)
    401               -> refresh once, persist, retry once
    >= 500            -> wait, retry once with the current token
    other non-2xx     -> ApiError(status, friendly message)

A 401 is resolved before the 5xx branch, so a post-refresh retry that
answers 5xx still gets its one server-error retry.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from .auth import SessionManager
from .config import Settings
from .errors import (
    ApiError,
    ForgeError,
    NetworkUnreachableError,
    ServerError,
    SessionExpiredError,
    friendly_http_error,
)
from .models.session import Session
from .session_store import SessionStore

logger = logging.getLogger(__name__)


class ApiClient:
    """Authenticated client for the Forge backend."""

    def __init__(
        self,
        settings: Settings,
        store: SessionStore,
        auth: SessionManager,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings
        self.store = store
        self.auth = auth
        self._transport = transport
        self.retry_delay = settings.retry_delay if retry_delay is None else retry_delay
        self._sleep = sleep

    async def get(self, path: str, session: Session, params: Optional[dict] = None) -> Any:
        return await self._request("GET", path, session, params=params)

    async def post(self, path: str, body: dict, session: Session) -> Any:
        return await self._request("POST", path, session, body=body)

    async def patch(self, path: str, body: dict, session: Session) -> Any:
        return await self._request("PATCH", path, session, body=body)

    async def _request(
        self,
        method: str,
        path: str,
        session: Session,
        params: Optional[dict] = None,
        body: Optional[dict] = None,
    ) -> Any:
        async with httpx.AsyncClient(
            base_url=self.settings.api_url,
            transport=self._transport,
            timeout=self.settings.http_timeout,
        ) as client:

            async def send(token: str) -> httpx.Response:
                headers = {
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                    "x-team-id": session.team_id,
                }
                logger.debug("%s %s", method, path)
                try:
                    return await client.request(
                        method,
                        path,
                        params=params,
                        content=json.dumps(body) if body is not None else None,
                        headers=headers,
                    )
                except httpx.TransportError as e:
                    logger.debug("%s %s transport failure: %s", method, path, e)
                    raise NetworkUnreachableError() from e

            token = session.access_token
            response = await send(token)

            if response.status_code == 401:
                logger.debug("%s %s returned 401, refreshing token", method, path)
                try:
                    refreshed = await self.auth.refresh_token(session.refresh_token)
                except ForgeError as e:
                    raise SessionExpiredError() from e

                updated = session.with_refreshed_token(refreshed)
                self.store.save(updated)
                token = updated.access_token

                logger.info("Retrying %s %s with refreshed token", method, path)
                response = await send(token)
                if response.status_code == 401:
                    raise SessionExpiredError()

            if response.status_code >= 500:
                logger.info(
                    "%s %s returned %d, retrying in %.1fs",
                    method, path, response.status_code, self.retry_delay,
                )
                await self._sleep(self.retry_delay)
                response = await send(token)
                if response.status_code >= 500:
                    raise ServerError(response.status_code)

            if not response.is_success:
                raise ApiError(response.status_code, friendly_http_error(response.status_code))

            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise ApiError(
                    response.status_code, "Forge server returned a malformed response."
                ) from e
