"""start_implementation: record the branch and move FORGED to EXECUTING."""

from __future__ import annotations

from mcp import types

from ...errors import ForgeError
from ...services import tickets
from ..results import error_result, text_result
from .common import missing_argument, parse_qa_items, required_string, ticket_error

BRANCH_PREFIX = "forge/"

DEFINITION = types.Tool(
    name="start_implementation",
    description=(
        "Record the implementation branch and optional Q&A from the developer agent, "
        "transitioning the ticket from FORGED to EXECUTING. Call this after the developer "
        "has answered implementation questions and the branch name has been generated."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "ticketId": {
                "type": "string",
                "description": 'The ticket ID (e.g., "aec_abc123")',
            },
            "branchName": {
                "type": "string",
                "description": 'The branch name (must start with "forge/")',
            },
            "qaItems": {
                "type": "array",
                "description": "Optional Q&A pairs collected during the implementation preparation session",
                "items": {
                    "type": "object",
                    "properties": {
                        "question": {"type": "string", "description": "The implementation question that was asked"},
                        "answer": {"type": "string", "description": "The developer's answer"},
                    },
                    "required": ["question", "answer"],
                },
            },
        },
        "required": ["ticketId", "branchName"],
    },
)


async def handle(arguments: dict, session, api) -> types.CallToolResult:
    ticket_id = required_string(arguments, "ticketId")
    if ticket_id is None:
        return missing_argument("ticketId")

    branch_name = required_string(arguments, "branchName")
    if branch_name is None:
        return missing_argument("branchName")
    if not branch_name.startswith(BRANCH_PREFIX):
        return error_result(f'Branch name must start with "{BRANCH_PREFIX}"')

    qa_items = None
    raw_items = arguments.get("qaItems")
    if isinstance(raw_items, list):
        qa_items = parse_qa_items(raw_items)
        if qa_items is None:
            return error_result("Each qaItem must have string fields: question and answer")

    try:
        result = await tickets.start_implementation(
            api, session, ticket_id, branch_name, qa_items=qa_items
        )
    except ForgeError as e:
        return ticket_error(e, ticket_id)

    result = result or {}
    return text_result(
        f"Implementation started for {result.get('ticketId', ticket_id)} on branch "
        f'"{result.get("branchName", branch_name)}". '
        f'Status is now "{result.get("status", "EXECUTING")}".'
    )
