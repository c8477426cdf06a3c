"""Shared service layer for CLI and MCP."""

from .tickets import (
    get_ticket,
    get_ticket_detail,
    list_tickets,
    normalize_filter,
    list_team_members,
    member_names,
    update_ticket_status,
    assign_ticket,
    submit_review_session,
    start_implementation,
)
from .git import GitService, GitStatus, GitError

__all__ = [
    "get_ticket",
    "get_ticket_detail",
    "list_tickets",
    "normalize_filter",
    "list_team_members",
    "member_names",
    "update_ticket_status",
    "assign_ticket",
    "submit_review_session",
    "start_implementation",
    "GitService",
    "GitStatus",
    "GitError",
]
