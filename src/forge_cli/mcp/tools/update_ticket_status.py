"""update_ticket_status: move a ticket to another status."""

from __future__ import annotations

from mcp import types

from ...errors import ForgeError
from ...models.ticket import TicketStatus
from ...services import tickets
from ..results import error_result, json_result
from .common import missing_argument, required_string, ticket_error

VALID_STATUSES = TicketStatus.values()

DEFINITION = types.Tool(
    name="update_ticket_status",
    description=(
        "Update the status of a Forge ticket. Call this after completing implementation "
        "to mark the ticket as CREATED, or to transition it to another valid status."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "ticketId": {
                "type": "string",
                "description": 'The ticket ID to update (e.g., "T-001")',
            },
            "status": {
                "type": "string",
                "description": f"New status value. Must be one of: {', '.join(VALID_STATUSES)}",
            },
        },
        "required": ["ticketId", "status"],
    },
)


async def handle(arguments: dict, session, api) -> types.CallToolResult:
    ticket_id = required_string(arguments, "ticketId")
    if ticket_id is None:
        return missing_argument("ticketId")

    raw_status = arguments.get("status")
    if raw_status not in VALID_STATUSES:
        return error_result(
            f"Invalid status: {raw_status}. Must be one of: {', '.join(VALID_STATUSES)}"
        )

    try:
        result = await tickets.update_ticket_status(
            api, session, ticket_id, TicketStatus(raw_status)
        )
    except ForgeError as e:
        return ticket_error(e, ticket_id)

    new_status = result.get("status", raw_status) if isinstance(result, dict) else raw_status
    return json_result({"success": True, "ticketId": ticket_id, "newStatus": new_status})
