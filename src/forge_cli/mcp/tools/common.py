"""Argument validation and error mapping shared by tool handlers."""

from __future__ import annotations

from typing import Optional

from mcp import types

from ...errors import ApiError, ForgeError
from ...models.ticket import QAItem
from ..results import error_result


def required_string(arguments: dict, name: str) -> Optional[str]:
    """Return the stripped argument, or None if it is missing or blank."""
    value = arguments.get(name)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def missing_argument(name: str) -> types.CallToolResult:
    return error_result(f"Missing required argument: {name}")


def parse_qa_items(raw: list) -> Optional[list[QAItem]]:
    """Validate `{question, answer}` objects. None means an item is malformed."""
    items = []
    for item in raw:
        if not isinstance(item, dict):
            return None
        question, answer = item.get("question"), item.get("answer")
        if not isinstance(question, str) or not isinstance(answer, str):
            return None
        items.append(QAItem(question=question, answer=answer))
    return items


def ticket_error(err: ForgeError, ticket_id: str) -> types.CallToolResult:
    if isinstance(err, ApiError) and err.status_code == 404:
        return error_result(f"Ticket not found: {ticket_id}")
    return error_result(err.message)
