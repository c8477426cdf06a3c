"""Logging setup.

All log output goes to stderr through rich. stdout is reserved for command
output and, under `forge mcp`, for protocol frames.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

_configured = False


def setup_logging(verbose: bool = False) -> None:
    """Install a single stderr RichHandler on the `forge_cli` logger."""
    global _configured

    level_name = os.environ.get("FORGE_LOG_LEVEL")
    if level_name:
        level = logging.getLevelName(level_name.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    else:
        level = logging.DEBUG if verbose else logging.WARNING

    logger = logging.getLogger("forge_cli")
    logger.setLevel(level)

    if _configured:
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    _configured = True
