"""Envelope helpers for tool and prompt results."""

from __future__ import annotations

import json
from typing import Any

from mcp import types


def text_result(text: str) -> types.CallToolResult:
    return types.CallToolResult(content=[types.TextContent(type="text", text=text)])


def json_result(payload: Any) -> types.CallToolResult:
    return text_result(json.dumps(payload))


def error_result(text: str) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=True,
    )


def prompt_result(text: str, role: str = "user") -> types.GetPromptResult:
    """A prompt envelope holding a single text message."""
    return types.GetPromptResult(
        messages=[
            types.PromptMessage(role=role, content=types.TextContent(type="text", text=text)),
        ]
    )


def prompt_error(message: str, role: str = "user") -> types.GetPromptResult:
    return prompt_result(f"Error: {message}", role=role)
