"""Session and device-flow data models."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Optional

# Access tokens issued by the device flow live for 15 minutes
DEFAULT_TOKEN_LIFETIME = timedelta(minutes=15)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC string with a `Z` suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing `Z`."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class SessionUser:
    """Identity attached to a session."""
    email: str
    display_name: str


@dataclass(frozen=True)
class TokenRefresh:
    """Result of a refresh-token exchange."""
    access_token: str
    expires_at: str

    @classmethod
    def from_dict(cls, data: dict) -> "TokenRefresh":
        return cls(access_token=data["accessToken"], expires_at=data["expiresAt"])


@dataclass(frozen=True)
class Session:
    """An authenticated credential bundle.

    Sessions are values: a refresh produces a new Session through
    `with_refreshed_token` and the caller persists it.
    """
    access_token: str
    refresh_token: str
    expires_at: str
    user_id: str
    team_id: str
    user: SessionUser
    workspace_id: Optional[str] = None

    def with_refreshed_token(self, refreshed: TokenRefresh) -> "Session":
        """Return a copy carrying the new access token and expiry."""
        return replace(self, access_token=refreshed.access_token, expires_at=refreshed.expires_at)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check the recorded expiry. Unparseable expiries count as expired."""
        try:
            expires = parse_iso(self.expires_at)
        except ValueError:
            return True
        return expires <= (now or utc_now())

    def to_dict(self) -> dict:
        """Serialize to the persisted camelCase layout."""
        data = {
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "expiresAt": self.expires_at,
            "userId": self.user_id,
            "teamId": self.team_id,
            "user": {
                "email": self.user.email,
                "displayName": self.user.display_name,
            },
        }
        if self.workspace_id:
            data["workspaceId"] = self.workspace_id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """Parse the persisted layout.

        Raises:
            KeyError, TypeError, ValueError: if a field is missing or mistyped.
        """
        user = data["user"]
        fields = {
            "access_token": data["accessToken"],
            "refresh_token": data["refreshToken"],
            "expires_at": data["expiresAt"],
            "user_id": data["userId"],
            "team_id": data["teamId"],
            "email": user["email"],
            "display_name": user["displayName"],
        }
        for name, value in fields.items():
            if not isinstance(value, str):
                raise TypeError(f"{name} must be a string")
        if "@" not in fields["email"]:
            raise ValueError("user.email is not an email address")

        workspace_id = data.get("workspaceId")
        return cls(
            access_token=fields["access_token"],
            refresh_token=fields["refresh_token"],
            expires_at=fields["expires_at"],
            user_id=fields["user_id"],
            team_id=fields["team_id"],
            user=SessionUser(email=fields["email"], display_name=fields["display_name"]),
            workspace_id=workspace_id if isinstance(workspace_id, str) else None,
        )

    @classmethod
    def from_token_response(cls, data: dict, now: Optional[datetime] = None) -> "Session":
        """Build a session from a successful device-token response.

        The token endpoint does not always report an expiry, so one is derived
        from the default access-token lifetime when absent.
        """
        payload = dict(data)
        if not payload.get("expiresAt"):
            payload["expiresAt"] = to_iso((now or utc_now()) + DEFAULT_TOKEN_LIFETIME)
        return cls.from_dict(payload)


@dataclass(frozen=True)
class DeviceAuthorization:
    """Ephemeral device-code grant shown to the user while polling."""
    device_code: str
    user_code: str
    verification_uri: str
    expires_in: int
    interval: int

    @classmethod
    def from_dict(cls, data: dict) -> "DeviceAuthorization":
        return cls(
            device_code=data["deviceCode"],
            user_code=data["userCode"],
            verification_uri=data["verificationUri"],
            expires_in=int(data["expiresIn"]),
            interval=int(data["interval"]),
        )
