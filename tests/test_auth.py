"""Tests for the device flow and token refresh."""

import json

import httpx
import pytest

from forge_cli.auth import is_authenticated
from forge_cli.errors import (
    AuthDeniedError,
    AuthExpiredError,
    AuthInitError,
    AuthProtocolError,
    AuthTimeoutError,
    NetworkUnreachableError,
    SessionExpiredError,
)

from conftest import make_session

TOKEN_RESPONSE = {
    "accessToken": "access-1",
    "refreshToken": "refresh-1",
    "expiresAt": "2030-01-01T00:00:00.000Z",
    "userId": "user-1",
    "teamId": "team-1",
    "user": {"email": "dev@example.com", "displayName": "Dev One"},
}
PENDING = {"error": "authorization_pending"}


class TestStartDeviceAuthorization:
    """Requesting a device code."""

    @pytest.mark.asyncio
    async def test_parses_grant(self, auth, backend):
        """Should return the camelCase grant as a DeviceAuthorization."""
        backend.add("POST", "/auth/device/request", 200, {
            "deviceCode": "dev-code",
            "userCode": "ABCD-1234",
            "verificationUri": "https://forge.app/device",
            "expiresIn": 900,
            "interval": 5,
        })

        grant = await auth.start_device_authorization()

        assert grant.device_code == "dev-code"
        assert grant.user_code == "ABCD-1234"
        assert grant.interval == 5

    @pytest.mark.asyncio
    async def test_non_success_is_init_error(self, auth, backend):
        backend.add("POST", "/auth/device/request", 503)

        with pytest.raises(AuthInitError):
            await auth.start_device_authorization()

    @pytest.mark.asyncio
    async def test_unreachable_is_init_error(self, auth, backend):
        backend.add("POST", "/auth/device/request", exc=httpx.ConnectError("refused"))

        with pytest.raises(AuthInitError):
            await auth.start_device_authorization()


class TestPollForToken:
    """Bounded polling loop."""

    @pytest.mark.asyncio
    async def test_pending_then_success(self, auth, backend, clock):
        """N pending responses then success means exactly N+1 polls."""
        for _ in range(3):
            backend.add("POST", "/auth/device/token", 400, PENDING)
        backend.add("POST", "/auth/device/token", 200, TOKEN_RESPONSE)

        session = await auth.poll_for_token("dev-code", 5)

        assert session.access_token == "access-1"
        assert session.user.email == "dev@example.com"
        assert len(backend.calls("POST", "/auth/device/token")) == 4
        assert clock.sleeps == [5, 5, 5, 5]

    @pytest.mark.asyncio
    async def test_sends_device_code(self, auth, backend):
        backend.add("POST", "/auth/device/token", 200, TOKEN_RESPONSE)

        await auth.poll_for_token("dev-code", 1)

        assert json.loads(backend.requests[0].read()) == {"deviceCode": "dev-code"}

    @pytest.mark.asyncio
    async def test_missing_expiry_defaults_to_fifteen_minutes(self, auth, backend):
        """Should derive an expiry when the response carries none."""
        body = dict(TOKEN_RESPONSE)
        del body["expiresAt"]
        backend.add("POST", "/auth/device/token", 200, body)

        session = await auth.poll_for_token("dev-code", 1)

        assert session.expires_at.endswith("Z")
        assert not session.is_expired()

    @pytest.mark.asyncio
    async def test_expired_token_fails_on_first_response(self, auth, backend):
        backend.add("POST", "/auth/device/token", 400, {"error": "expired_token"})

        with pytest.raises(AuthExpiredError):
            await auth.poll_for_token("dev-code", 5)

        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_access_denied(self, auth, backend):
        backend.add("POST", "/auth/device/token", 400, {"error": "access_denied"})

        with pytest.raises(AuthDeniedError, match="denied"):
            await auth.poll_for_token("dev-code", 5)

    @pytest.mark.asyncio
    async def test_budget_smaller_than_interval_times_out_after_one_poll(self, auth, backend):
        """Should poll once, then time out without a second poll."""
        backend.add("POST", "/auth/device/token", 400, PENDING)

        with pytest.raises(AuthTimeoutError):
            await auth.poll_for_token("dev-code", 5, max_wait_ms=1000)

        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_unknown_400_error_is_protocol_error(self, auth, backend):
        backend.add("POST", "/auth/device/token", 400, {"error": "slow_down"})

        with pytest.raises(AuthProtocolError):
            await auth.poll_for_token("dev-code", 5)

    @pytest.mark.asyncio
    async def test_other_status_is_protocol_error(self, auth, backend):
        backend.add("POST", "/auth/device/token", 500)

        with pytest.raises(AuthProtocolError):
            await auth.poll_for_token("dev-code", 5)

    @pytest.mark.asyncio
    async def test_incomplete_success_body_is_protocol_error(self, auth, backend):
        """A 2xx without session fields must not yield a partial session."""
        backend.add("POST", "/auth/device/token", 200, {"accessToken": "only-this"})

        with pytest.raises(AuthProtocolError):
            await auth.poll_for_token("dev-code", 5)

    @pytest.mark.asyncio
    async def test_transport_failure(self, auth, backend):
        backend.add("POST", "/auth/device/token", exc=httpx.ConnectError("refused"))

        with pytest.raises(NetworkUnreachableError):
            await auth.poll_for_token("dev-code", 5)


class TestRefreshToken:
    """Single-shot refresh exchange."""

    @pytest.mark.asyncio
    async def test_success(self, auth, backend):
        backend.add("POST", "/auth/refresh", 200, {"accessToken": "a2", "expiresAt": "2031-01-01T00:00:00Z"})

        refreshed = await auth.refresh_token("refresh-1")

        assert refreshed.access_token == "a2"
        assert b"refresh-1" in backend.requests[0].read()

    @pytest.mark.asyncio
    async def test_rejected_is_session_expired(self, auth, backend):
        backend.add("POST", "/auth/refresh", 401)

        with pytest.raises(SessionExpiredError, match="forge login"):
            await auth.refresh_token("refresh-1")

        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_malformed_body_is_session_expired(self, auth, backend):
        backend.add("POST", "/auth/refresh", 200, {"unexpected": True})

        with pytest.raises(SessionExpiredError):
            await auth.refresh_token("refresh-1")


class TestIsAuthenticated:
    """Presence check only, expiry is ignored."""

    def test_none(self):
        assert is_authenticated(None) is False

    def test_empty_token(self):
        assert is_authenticated(make_session(access_token="")) is False

    def test_expired_session_still_counts(self):
        assert is_authenticated(make_session(expires_at="2000-01-01T00:00:00Z")) is True
