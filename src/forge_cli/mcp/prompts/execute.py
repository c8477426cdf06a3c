"""forge-execute (and its forge-exec alias): implement a ticket."""

from __future__ import annotations

from mcp import types

from .common import TICKET_ID_ARGUMENT, ticket_prompt

DEFINITION = types.Prompt(
    name="forge-execute",
    description=(
        "Load the Forge dev-executor persona and full ticket context (XML) "
        "to begin implementing a ticket with Claude Code."
    ),
    arguments=[TICKET_ID_ARGUMENT],
)

EXEC_DEFINITION = types.Prompt(
    name="forge-exec",
    description=(
        "Execute a Forge ticket. Loads the dev-executor persona and full ticket "
        "context to begin implementation."
    ),
    arguments=[TICKET_ID_ARGUMENT],
)


async def handle(arguments: dict, session, api) -> types.GetPromptResult:
    return await ticket_prompt(arguments, session, api, guide="dev-executor")
