"""get_ticket_context: full ticket JSON."""

from __future__ import annotations

from mcp import types

from ...errors import ForgeError
from ...services import tickets
from ..results import json_result
from .common import missing_argument, required_string, ticket_error

DEFINITION = types.Tool(
    name="get_ticket_context",
    description=(
        "Fetch the full specification for a Forge ticket including problem statement, "
        "solution, acceptance criteria, and file changes. Use this to understand what to implement."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "ticketId": {
                "type": "string",
                "description": "The ticket ID to fetch (e.g., T-001)",
            },
        },
        "required": ["ticketId"],
    },
)


async def handle(arguments: dict, session, api) -> types.CallToolResult:
    ticket_id = required_string(arguments, "ticketId")
    if ticket_id is None:
        return missing_argument("ticketId")

    try:
        ticket = await tickets.get_ticket(api, session, ticket_id)
    except ForgeError as e:
        return ticket_error(e, ticket_id)
    return json_result(ticket)
