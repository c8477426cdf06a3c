"""MCP tool catalogue."""

from ..registry import ToolSpec
from . import (
    get_file_changes,
    get_repository_context,
    get_ticket_context,
    list_tickets,
    start_implementation,
    submit_review_session,
    update_ticket_status,
)

TOOLS = tuple(
    ToolSpec(module.DEFINITION, module.handle)
    for module in (
        get_ticket_context,
        get_file_changes,
        get_repository_context,
        update_ticket_status,
        list_tickets,
        submit_review_session,
        start_implementation,
    )
)

__all__ = ["TOOLS"]
