"""forge-develop: guided implementation preparation."""

from __future__ import annotations

from mcp import types

from .common import TICKET_ID_ARGUMENT, ticket_prompt

DEFINITION = types.Prompt(
    name="forge-develop",
    description=(
        "Load the Forge dev-implementer persona and full ticket context (XML) "
        "to begin a guided implementation preparation session."
    ),
    arguments=[TICKET_ID_ARGUMENT],
)


async def handle(arguments: dict, session, api) -> types.GetPromptResult:
    return await ticket_prompt(arguments, session, api, guide="dev-implementer", include_plan=True)
