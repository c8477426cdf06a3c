"""Device-code authentication and token refresh against the Forge backend."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

import httpx

from .config import Settings
from .errors import (
    AuthDeniedError,
    AuthExpiredError,
    AuthInitError,
    AuthProtocolError,
    AuthTimeoutError,
    NetworkUnreachableError,
    SessionExpiredError,
)
from .models.session import DeviceAuthorization, Session, TokenRefresh

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class SessionManager:
    """Runs the device flow and exchanges refresh tokens.

    Never prints and never persists. Callers decide what to do with the
    Session values it returns.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self._transport = transport
        self._sleep = sleep
        self._clock = clock

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.api_url,
            transport=self._transport,
            timeout=self.settings.http_timeout,
        )

    async def start_device_authorization(self) -> DeviceAuthorization:
        """Request a fresh device code.

        Raises:
            AuthInitError: if the backend is unreachable, refuses, or answers
                with an unusable body.
        """
        try:
            async with self._client() as client:
                response = await client.post("/auth/device/request", headers=JSON_HEADERS)
        except httpx.TransportError as e:
            logger.debug("Device request transport failure: %s", e)
            raise AuthInitError(
                "Cannot reach Forge server to start authentication. Check your connection.",
                suggestions=["Run: forge login"],
            ) from e

        if not response.is_success:
            raise AuthInitError(
                f"Failed to initiate authentication: {response.status_code} {response.reason_phrase}"
            )

        try:
            return DeviceAuthorization.from_dict(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise AuthInitError("Failed to initiate authentication: malformed response.") from e

    async def poll_for_token(
        self,
        device_code: str,
        interval_seconds: float,
        max_wait_ms: Optional[int] = None,
    ) -> Session:
        """Poll the token endpoint until the user approves, denies, or time runs out.

        The interval is fixed by the server and there is no backoff. Only
        `authorization_pending` keeps the loop going; every other outcome is
        terminal.

        Raises:
            AuthExpiredError: the device code expired.
            AuthDeniedError: the user denied access.
            AuthTimeoutError: `max_wait_ms` elapsed.
            AuthProtocolError: any other status or an incomplete success body.
            NetworkUnreachableError: the transport failed.
        """
        if max_wait_ms is None:
            max_wait_ms = self.settings.max_poll_ms
        budget = max_wait_ms / 1000
        start = self._clock()
        attempts = 0

        async with self._client() as client:
            while self._clock() - start < budget:
                await self._sleep(interval_seconds)
                attempts += 1

                try:
                    response = await client.post(
                        "/auth/device/token",
                        json={"deviceCode": device_code},
                        headers=JSON_HEADERS,
                    )
                except httpx.TransportError as e:
                    raise NetworkUnreachableError() from e

                logger.debug("Token poll %d returned %d", attempts, response.status_code)

                if response.is_success:
                    try:
                        return Session.from_token_response(response.json())
                    except (ValueError, KeyError, TypeError) as e:
                        raise AuthProtocolError(
                            "Forge server returned an incomplete session. Run `forge login` to try again."
                        ) from e

                if response.status_code == 400:
                    error = _error_code(response)
                    if error == "authorization_pending":
                        continue
                    if error == "expired_token":
                        raise AuthExpiredError(
                            "Authorization timed out. Run `forge login` to try again.",
                            suggestions=["Run: forge login"],
                        )
                    if error == "access_denied":
                        raise AuthDeniedError(
                            "Authorization was denied. Run `forge login` to try again.",
                            suggestions=["Run: forge login"],
                        )

                raise AuthProtocolError(
                    f"Unexpected server response: {response.status_code} {response.reason_phrase}"
                )

        minutes = max(1, round(max_wait_ms / 60_000))
        raise AuthTimeoutError(
            f"Authorization timed out ({minutes} min exceeded). Run `forge login` to try again.",
            suggestions=["Run: forge login"],
        )

    async def refresh_token(self, refresh_token: str) -> TokenRefresh:
        """Exchange a refresh token for a new access token. Never retried.

        Raises:
            SessionExpiredError: any non-success status or malformed body.
            NetworkUnreachableError: the transport failed.
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    "/auth/refresh",
                    json={"refreshToken": refresh_token},
                    headers=JSON_HEADERS,
                )
        except httpx.TransportError as e:
            raise NetworkUnreachableError() from e

        if not response.is_success:
            logger.debug("Refresh rejected with %d", response.status_code)
            raise SessionExpiredError()

        try:
            return TokenRefresh.from_dict(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise SessionExpiredError() from e

    def is_authenticated(self, session: Optional[Session]) -> bool:
        return is_authenticated(session)


def is_authenticated(session: Optional[Session]) -> bool:
    """True if there is a session with a non-empty access token.

    Expiry is not checked here. The API client refreshes lazily on 401.
    """
    return session is not None and bool(session.access_token)


def _error_code(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        return error if isinstance(error, str) else None
    return None
