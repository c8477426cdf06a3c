"""Error types raised by the session, API and store layers.

These layers never print. The CLI turns them into text plus an exit code and
the MCP server turns them into error envelopes.
"""

from __future__ import annotations

from typing import Optional

STATUS_PAGE_URL = "https://status.forge.app"


class ForgeError(Exception):
    """Base class for every expected Forge failure."""

    def __init__(self, message: str, suggestions: Optional[list[str]] = None):
        super().__init__(message)
        self.message = message
        self.suggestions = suggestions or []


class NetworkUnreachableError(ForgeError):
    """The transport failed (DNS, refused connection, timeout). Never retried."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or "Cannot reach Forge server. Check your connection or try again later."
        )


class SessionExpiredError(ForgeError):
    """The refresh token was rejected or the session must be re-created."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or "Session expired. Run `forge login` to re-authenticate.",
            suggestions=["Run: forge login"],
        )


class ServerError(ForgeError):
    """The backend answered 5xx twice in a row."""

    def __init__(self, status: int):
        super().__init__(
            f"Forge server error ({status}) after one automatic retry. "
            f"Wait a moment and try again, or check {STATUS_PAGE_URL}."
        )
        self.status = status


class ApiError(ForgeError):
    """Any other non-success status, with a friendly message."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class SessionStoreError(ForgeError):
    """The persisted session file exists but cannot be used."""


class AuthFlowError(ForgeError):
    """Base class for device-flow failures."""


class AuthInitError(AuthFlowError):
    """The backend refused or could not be reached when requesting a device code."""


class AuthExpiredError(AuthFlowError):
    """The device code expired before the user approved it."""


class AuthDeniedError(AuthFlowError):
    """The user denied the authorization request."""


class AuthTimeoutError(AuthFlowError):
    """Polling exceeded its time budget."""


class AuthProtocolError(AuthFlowError):
    """The token endpoint answered with something outside the protocol."""


def friendly_http_error(status: int) -> str:
    """Map a non-success HTTP status to a message a user can act on."""
    if status == 403:
        return "You do not have permission. Check your team membership or run `forge login`."
    if status == 404:
        return "Resource not found. Check the ID and try again."
    if status == 429:
        return "Rate limited. Wait a moment and try again."
    return f"Unexpected server response ({status}). Try again or check {STATUS_PAGE_URL}."
