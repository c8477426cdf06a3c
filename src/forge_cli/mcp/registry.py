"""Name-keyed registries of tools and prompts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from mcp import types

ToolHandler = Callable[[dict, Any, Any], Awaitable[types.CallToolResult]]
PromptHandler = Callable[[dict, Any, Any], Awaitable[types.GetPromptResult]]


@dataclass(frozen=True)
class ToolSpec:
    definition: types.Tool
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.definition.name


@dataclass(frozen=True)
class PromptSpec:
    definition: types.Prompt
    handler: PromptHandler

    @property
    def name(self) -> str:
        return self.definition.name


Spec = TypeVar("Spec", ToolSpec, PromptSpec)


def build_registry(specs: Iterable[Spec]) -> dict[str, Spec]:
    """Index specs by name.

    Raises:
        ValueError: if two specs share a name.
    """
    registry: dict[str, Spec] = {}
    for spec in specs:
        if spec.name in registry:
            raise ValueError(f"Duplicate registration: {spec.name}")
        registry[spec.name] = spec
    return registry
