"""Bundled agent guides."""

from __future__ import annotations

import importlib.resources
from functools import lru_cache


@lru_cache(maxsize=None)
def load_guide(name: str) -> str:
    """Read `forge_cli/agents/<name>.md`."""
    return (importlib.resources.files("forge_cli.agents") / f"{name}.md").read_text(encoding="utf-8")
