"""get_file_changes: the files a ticket expects to touch."""

from __future__ import annotations

from mcp import types

from ...errors import ForgeError
from ...models.ticket import TicketDetail
from ...services import tickets
from ..results import text_result
from .common import missing_argument, required_string, ticket_error

DEFINITION = types.Tool(
    name="get_file_changes",
    description=(
        "Fetch the list of files to create, modify, or delete for a Forge ticket, "
        "one per line as `[action] path` with optional notes. Use this to understand "
        "what files need to be touched during implementation."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "ticketId": {
                "type": "string",
                "description": "The ticket ID to fetch file changes for (e.g., T-001)",
            },
        },
        "required": ["ticketId"],
    },
)


def format_file_changes(ticket_id: str, ticket: TicketDetail) -> str:
    if not ticket.file_changes:
        return "No file changes specified for this ticket."
    lines = []
    for change in ticket.file_changes:
        note = f" — {change.notes}" if change.notes else ""
        lines.append(f"[{change.action}] {change.path}{note}")
    return f"File changes for {ticket_id}:\n" + "\n".join(lines)


async def handle(arguments: dict, session, api) -> types.CallToolResult:
    ticket_id = required_string(arguments, "ticketId")
    if ticket_id is None:
        return missing_argument("ticketId")

    try:
        ticket = await tickets.get_ticket_detail(api, session, ticket_id)
    except ForgeError as e:
        return ticket_error(e, ticket_id)
    return text_result(format_file_changes(ticket_id, ticket))
