"""Shared ticket operations for CLI and MCP.

Each function is a single backend call through the ApiClient, so the refresh
and retry policy applies uniformly. Errors propagate as ForgeError subclasses.
"""

from __future__ import annotations

from typing import Optional

from ..api_client import ApiClient
from ..models.session import Session
from ..models.ticket import QAItem, TicketDetail, TicketListItem, TicketStatus


def _ticket_path(ticket_id: str) -> str:
    return f"/tickets/{ticket_id.strip()}"


async def get_ticket(api: ApiClient, session: Session, ticket_id: str) -> dict:
    """Fetch the raw ticket payload."""
    return await api.get(_ticket_path(ticket_id), session)


async def get_ticket_detail(api: ApiClient, session: Session, ticket_id: str) -> TicketDetail:
    return TicketDetail.from_dict(await get_ticket(api, session, ticket_id))


def normalize_filter(raw) -> str:
    """Map a caller-supplied filter to "all" or "mine".

    Missing or blank means "all". Any other value than "all" means "mine".
    """
    if not isinstance(raw, str) or not raw.strip():
        return "all"
    return "all" if raw.strip().lower() == "all" else "mine"


async def list_tickets(
    api: ApiClient,
    session: Session,
    filter: str = "all",
) -> list[TicketListItem]:
    """List team tickets. `filter` is "all" or "mine"."""
    params = {"teamId": session.team_id}
    if filter == "mine":
        params["assignedToMe"] = "true"
    else:
        params["all"] = "true"
    rows = await api.get("/tickets", session, params=params) or []
    return [TicketListItem.from_dict(row) for row in rows]


async def list_team_members(api: ApiClient, session: Session) -> list[dict]:
    """Return team members as `{userId, displayName, ...}` dicts."""
    data = await api.get(f"/teams/{session.team_id}/members", session)
    if isinstance(data, dict):
        data = data.get("members", [])
    return list(data or [])


async def member_names(api: ApiClient, session: Session) -> dict[str, str]:
    """Map user IDs to display names. Missing names fall back to email."""
    names = {}
    for member in await list_team_members(api, session):
        user_id = member.get("userId") or member.get("id")
        if not user_id:
            continue
        names[user_id] = member.get("displayName") or member.get("email") or user_id
    return names


async def update_ticket_status(
    api: ApiClient,
    session: Session,
    ticket_id: str,
    status: TicketStatus,
) -> dict:
    return await api.patch(_ticket_path(ticket_id), {"status": status.value}, session)


async def assign_ticket(
    api: ApiClient,
    session: Session,
    ticket_id: str,
    user_id: Optional[str] = None,
) -> dict:
    """Assign a ticket, to the session's user unless `user_id` is given."""
    return await api.patch(
        _ticket_path(ticket_id), {"assignedTo": user_id or session.user_id}, session
    )


async def submit_review_session(
    api: ApiClient,
    session: Session,
    ticket_id: str,
    qa_items: list[QAItem],
) -> dict:
    """Post review Q&A. The backend moves the ticket to WAITING_FOR_APPROVAL."""
    return await api.post(
        f"{_ticket_path(ticket_id)}/review-session",
        {"qaItems": [item.to_dict() for item in qa_items]},
        session,
    )


async def start_implementation(
    api: ApiClient,
    session: Session,
    ticket_id: str,
    branch_name: str,
    qa_items: Optional[list[QAItem]] = None,
) -> dict:
    """Record the implementation branch. The backend moves FORGED to EXECUTING."""
    body: dict = {"branchName": branch_name.strip()}
    if qa_items is not None:
        body["qaItems"] = [item.to_dict() for item in qa_items]
    return await api.post(f"{_ticket_path(ticket_id)}/start-implementation", body, session)
