"""Data models for Forge CLI."""

from .session import DeviceAuthorization, Session, SessionUser, TokenRefresh
from .ticket import FileChange, QAItem, TicketDetail, TicketListItem, TicketStatus

__all__ = [
    "DeviceAuthorization",
    "Session",
    "SessionUser",
    "TokenRefresh",
    "FileChange",
    "QAItem",
    "TicketDetail",
    "TicketListItem",
    "TicketStatus",
]
