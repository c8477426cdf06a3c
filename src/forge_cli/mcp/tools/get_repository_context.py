"""get_repository_context: branch, working tree status and file tree."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Optional

from mcp import types

from ...services.git import GitError, GitService
from ..results import error_result, json_result

DEFINITION = types.Tool(
    name="get_repository_context",
    description=(
        "Fetch the current git repository context including active branch, working "
        "directory status (modified/untracked/staged files), and a file tree snapshot. "
        "Use this to understand the repository state before implementing changes."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": "Absolute path to the repository root. Defaults to the current working directory.",
            },
        },
        "required": [],
    },
)


def resolve_within_cwd(requested: str, cwd: Optional[Path] = None) -> Optional[Path]:
    """Resolve `requested` against cwd, following symlinks.

    Returns None if the result escapes the working directory.
    """
    base = (cwd or Path.cwd()).resolve()
    resolved = (base / requested).resolve()
    if resolved != base and base not in resolved.parents:
        return None
    return resolved


def collect_context(path: Path) -> dict:
    git = GitService(path)
    return {
        "branch": git.get_branch(),
        "workingDirectory": str(path),
        "status": git.get_status().to_dict(),
        "fileTree": git.get_file_tree(),
    }


async def handle(arguments: dict, session, api) -> types.CallToolResult:
    raw_path = arguments.get("path")
    if isinstance(raw_path, str) and raw_path.strip():
        path = resolve_within_cwd(raw_path.strip())
        if path is None:
            return error_result('{"error": "Path must be within the current working directory"}')
    else:
        path = Path(os.getcwd())

    try:
        context = await asyncio.to_thread(collect_context, path)
    except GitError as e:
        if e.not_a_repository:
            return error_result('{"error": "Not a git repository"}')
        return error_result(str(e))
    return json_result(context)
