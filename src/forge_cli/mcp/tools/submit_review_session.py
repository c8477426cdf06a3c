"""submit_review_session: send review Q&A back to the PM."""

from __future__ import annotations

from mcp import types

from ...errors import ForgeError
from ...services import tickets
from ..results import error_result, text_result
from .common import missing_argument, parse_qa_items, required_string, ticket_error

QA_ITEM_SCHEMA = {
    "type": "object",
    "properties": {
        "question": {"type": "string", "description": "The clarifying question that was asked"},
        "answer": {"type": "string", "description": "The developer's answer to the question"},
    },
    "required": ["question", "answer"],
}

DEFINITION = types.Tool(
    name="submit_review_session",
    description=(
        "Submit the Q&A pairs collected during a forge review session back to Forge. "
        "Call this after the developer has answered all clarifying questions. The ticket "
        "status will transition to WAITING_FOR_APPROVAL and the PM will see the answers "
        "in the web UI."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "ticketId": {
                "type": "string",
                "description": 'The ticket ID being reviewed (e.g., "aec_abc123")',
            },
            "qaItems": {
                "type": "array",
                "description": "The Q&A pairs collected during the review session",
                "items": QA_ITEM_SCHEMA,
                "minItems": 1,
            },
        },
        "required": ["ticketId", "qaItems"],
    },
)


async def handle(arguments: dict, session, api) -> types.CallToolResult:
    ticket_id = required_string(arguments, "ticketId")
    if ticket_id is None:
        return missing_argument("ticketId")

    raw_items = arguments.get("qaItems")
    if not isinstance(raw_items, list) or not raw_items:
        return error_result("qaItems must be a non-empty array of {question, answer} objects")
    qa_items = parse_qa_items(raw_items)
    if qa_items is None:
        return error_result("Each qaItem must have string fields: question and answer")

    try:
        result = await tickets.submit_review_session(api, session, ticket_id, qa_items)
    except ForgeError as e:
        return ticket_error(e, ticket_id)

    result = result or {}
    status = str(result.get("status", "WAITING_FOR_APPROVAL")).replace("-", " ")
    return text_result(
        f"Review session submitted for {result.get('ticketId', ticket_id)}. "
        f'Status is now "{status}". The PM will see your answers and can re-bake the ticket.'
    )
