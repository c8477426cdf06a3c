"""forge-review: clarifying questions for the PM."""

from __future__ import annotations

from mcp import types

from .common import TICKET_ID_ARGUMENT, ticket_prompt

DEFINITION = types.Prompt(
    name="forge-review",
    description=(
        "Load the Forge dev-reviewer persona and ticket summary to generate "
        "clarifying questions for the PM."
    ),
    arguments=[TICKET_ID_ARGUMENT],
)


async def handle(arguments: dict, session, api) -> types.GetPromptResult:
    # Reviews work from the summary only
    return await ticket_prompt(
        arguments, session, api, guide="dev-reviewer", include_file_changes=False
    )
