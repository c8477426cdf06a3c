"""MCP prompt catalogue."""

from ..registry import PromptSpec
from . import develop, execute, review, ticket_list

PROMPTS = (
    PromptSpec(execute.DEFINITION, execute.handle),
    PromptSpec(execute.EXEC_DEFINITION, execute.handle),
    PromptSpec(review.DEFINITION, review.handle),
    PromptSpec(develop.DEFINITION, develop.handle),
    PromptSpec(ticket_list.DEFINITION, ticket_list.handle),
)

__all__ = ["PROMPTS"]
