"""list_tickets: team tickets as a plain-text table."""

from __future__ import annotations

from mcp import types

from ...errors import ForgeError
from ...models.ticket import TicketListItem, status_value
from ...services import tickets
from ..results import error_result, text_result

DEFINITION = types.Tool(
    name="list_tickets",
    description=(
        "List all Forge tickets for the current team. Returns ticket IDs, titles, statuses, "
        "priorities, and assignees. Use this to find ticket IDs before calling "
        "get_ticket_context or review prompts."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "filter": {
                "type": "string",
                "description": 'Show "all" team tickets (default) or "mine" for only tickets assigned to me',
                "enum": ["all", "mine"],
            },
        },
        "required": [],
    },
)

HINT = (
    "\n\nTo review a ticket: /forge:review <ticketId>"
    "\nTo execute a ticket: /forge:exec <ticketId>"
)


def format_row(ticket: TicketListItem) -> str:
    status = status_value(ticket.status).replace("-", " ")
    priority = f" [{ticket.priority}]" if ticket.priority else ""
    assignee = f" ({ticket.assigned_to})" if ticket.assigned_to else ""
    return f"{ticket.id}  {status:<20} {ticket.title}{priority}{assignee}"


async def handle(arguments: dict, session, api) -> types.CallToolResult:
    filter = tickets.normalize_filter(arguments.get("filter"))

    try:
        rows = await tickets.list_tickets(api, session, filter=filter)
    except ForgeError as e:
        return error_result(f"Failed to list tickets: {e.message}")

    if not rows:
        return text_result(f"No tickets found (filter: {filter}).")

    plural = "" if len(rows) == 1 else "s"
    header = f"{len(rows)} ticket{plural} (filter: {filter}):\n"
    return text_result(header + "\n".join(format_row(t) for t in rows) + HINT)
