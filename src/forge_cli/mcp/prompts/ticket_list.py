"""list: team tickets as a markdown table with member names."""

from __future__ import annotations

import logging

from mcp import types

from ...errors import ForgeError
from ...services import tickets
from ...ui.formatters import tickets_markdown
from ..results import prompt_error, prompt_result

logger = logging.getLogger(__name__)

DEFINITION = types.Prompt(
    name="list",
    description=(
        "List your Forge tickets with status, priority, and assignee names. "
        "Use this to browse tickets before executing or reviewing one."
    ),
    arguments=[
        types.PromptArgument(
            name="filter",
            description='Show "all" team tickets (default) or "mine" for only assigned to me',
            required=False,
        ),
    ],
)

FOOTER = (
    "> To execute a ticket: `/forge:exec` with the ticket ID\n"
    "> To review a ticket: `/forge:review` with the ticket ID"
)


async def _member_names(session, api) -> dict[str, str]:
    # Names are decoration; the list still renders with raw IDs
    try:
        return await tickets.member_names(api, session)
    except ForgeError as e:
        logger.debug("Could not load team members: %s", e.message)
        return {}


async def handle(arguments: dict, session, api) -> types.GetPromptResult:
    filter = tickets.normalize_filter(arguments.get("filter"))

    try:
        rows = await tickets.list_tickets(api, session, filter=filter)
    except ForgeError as e:
        return prompt_error(f"Failed to fetch tickets: {e.message}")

    if not rows:
        hint = ""
        if filter != "all":
            hint = "\n\nTry the `list` prompt with filter `all` to see all team tickets."
        return prompt_result(f"No tickets found.{hint}")

    names = await _member_names(session, api)
    label = "All Team Tickets" if filter == "all" else "My Tickets"
    text = f"## {label} ({len(rows)})\n\n{tickets_markdown(rows, names)}\n\n{FOOTER}"
    return prompt_result(text)
