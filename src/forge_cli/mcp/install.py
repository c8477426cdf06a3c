"""Register the Forge MCP server with Claude Code."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

MCP_JSON = ".mcp.json"

FORGE_SERVER_ENTRY = {
    "type": "stdio",
    "command": "forge",
    "args": ["mcp"],
}


def write_mcp_json(cwd: Optional[Path] = None) -> Path:
    """Merge the forge entry into `<cwd>/.mcp.json`, keeping other servers.

    An unreadable or malformed file is replaced.
    """
    path = Path(cwd or Path.cwd()) / MCP_JSON

    existing: dict = {}
    try:
        loaded = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(loaded, dict):
            existing = loaded
    except (OSError, ValueError) as e:
        logger.debug("Starting a fresh %s: %s", path, e)

    servers = existing.get("mcpServers")
    if not isinstance(servers, dict):
        servers = {}
    merged = {**existing, "mcpServers": {**servers, "forge": dict(FORGE_SERVER_ENTRY)}}

    path.write_text(json.dumps(merged, indent=2) + "\n", encoding="utf-8")
    return path


def try_register_mcp_server(scope: str = "project") -> str:
    """Run `claude mcp add`. Returns "registered" or "skipped", never raises."""
    cmd = [
        "claude", "mcp", "add",
        "--transport", "stdio",
        "--scope", scope,
        "forge", "--", "forge", "mcp",
    ]
    try:
        subprocess.run(cmd, check=True, capture_output=True, timeout=60)
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("claude mcp add skipped: %s", e)
        return "skipped"
    return "registered"
