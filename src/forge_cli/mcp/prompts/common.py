"""Ticket-backed prompt construction."""

from __future__ import annotations

from mcp import types

from ...errors import ApiError, ForgeError
from ...services import tickets
from ..results import prompt_error, prompt_result
from .guides import load_guide
from .ticket_xml import serialize_ticket, wrap_prompt

TICKET_ID_ARGUMENT = types.PromptArgument(
    name="ticketId",
    description="The ticket ID (e.g., T-001)",
    required=True,
)


async def ticket_prompt(
    arguments: dict,
    session,
    api,
    guide: str,
    include_file_changes: bool = True,
    include_plan: bool = False,
) -> types.GetPromptResult:
    """Fetch a ticket and wrap it with an agent guide.

    Failures come back as a single `Error:` message rather than raising.
    """
    raw_id = arguments.get("ticketId")
    if not isinstance(raw_id, str) or not raw_id.strip():
        return prompt_error("Missing required argument: ticketId")
    ticket_id = raw_id.strip()

    try:
        ticket = await tickets.get_ticket_detail(api, session, ticket_id)
    except ApiError as e:
        if e.status_code == 404:
            return prompt_error(f"Ticket not found: {ticket_id}")
        return prompt_error(e.message)
    except ForgeError as e:
        return prompt_error(e.message)

    ticket_xml = serialize_ticket(
        ticket, include_file_changes=include_file_changes, include_plan=include_plan
    )
    return prompt_result(wrap_prompt(load_guide(guide), ticket_xml))
