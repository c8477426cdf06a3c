"""Launch the Claude Code CLI against a Forge MCP prompt."""

from __future__ import annotations

import logging
import os
import subprocess

from ..errors import ForgeError

logger = logging.getLogger(__name__)

CLAUDE_INSTALL_URL = "https://docs.anthropic.com/en/docs/claude-code"

PROMPT_FOR_ACTION = {
    "execute": "forge-exec",
    "review": "forge-review",
    "develop": "forge-develop",
}


class ClaudeNotFoundError(ForgeError):
    """The `claude` executable is not on PATH."""


def build_prompt(action: str, ticket_id: str) -> str:
    prompt_name = PROMPT_FOR_ACTION[action]
    return f'Use the {prompt_name} MCP prompt with ticketId "{ticket_id}" to {action} this ticket.'


def spawn_claude(action: str, ticket_id: str) -> int:
    """Run `claude` in the foreground with inherited stdio. Returns its exit code."""
    prompt = build_prompt(action, ticket_id)
    # claude is a .cmd shim on Windows and needs cmd.exe to run
    args = ["cmd", "/c", "claude", prompt] if os.name == "nt" else ["claude", prompt]
    logger.debug("Launching %s", args[0])
    try:
        return subprocess.run(args).returncode
    except FileNotFoundError as e:
        raise ClaudeNotFoundError(
            f"Claude CLI not found. Install: {CLAUDE_INSTALL_URL}",
            suggestions=[f"Install Claude Code: {CLAUDE_INSTALL_URL}"],
        ) from e
