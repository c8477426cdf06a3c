"""Forge MCP server.

A single-connection stdio server exposing the ticket tools and prompts to an
AI coding assistant. `call_tool` and `get_prompt` are the dispatch boundary:
they always return an envelope, so one failing handler never takes down the
channel for the calls after it.

The four protocol handlers are installed directly into the low-level server's
`request_handlers` map.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from typing import Callable, Iterable, Optional

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .. import __version__
from ..api_client import ApiClient
from ..session_store import SessionStore
from .prompts import PROMPTS
from .registry import PromptSpec, ToolSpec, build_registry
from .results import error_result, prompt_error
from .tools import TOOLS

logger = logging.getLogger(__name__)

NOT_LOGGED_IN = "Not logged in. Run `forge login` first."

Transport = Callable[[], AbstractAsyncContextManager]


class ForgeMCPServer:
    """Dispatches MCP requests to registered tool and prompt handlers."""

    def __init__(
        self,
        store: SessionStore,
        api: ApiClient,
        tools: Iterable[ToolSpec] = TOOLS,
        prompts: Iterable[PromptSpec] = PROMPTS,
        transport: Transport = stdio_server,
    ):
        self.store = store
        self.api = api
        self.tools = build_registry(tools)
        self.prompts = build_registry(prompts)
        self._transport = transport
        self._task: Optional[asyncio.Task] = None

        self.server = Server("forge", version=__version__)
        self.server.request_handlers[types.ListToolsRequest] = self._on_list_tools
        self.server.request_handlers[types.ListPromptsRequest] = self._on_list_prompts
        self.server.request_handlers[types.GetPromptRequest] = self._on_get_prompt
        self.server.request_handlers[types.CallToolRequest] = self._on_call_tool

    # -- dispatch ----------------------------------------------------------

    async def list_tools(self) -> list[types.Tool]:
        return [spec.definition for spec in self.tools.values()]

    async def list_prompts(self) -> list[types.Prompt]:
        return [spec.definition for spec in self.prompts.values()]

    async def call_tool(self, name: str, arguments: Optional[dict] = None) -> types.CallToolResult:
        """Run a tool. Never raises."""
        spec = self.tools.get(name)
        if spec is None:
            return error_result(f"Unknown tool: {name}")

        try:
            session = self.store.load(check_permissions=False)
            if session is None:
                return error_result(NOT_LOGGED_IN)
            logger.debug("Calling tool %s", name)
            return await spec.handler(arguments or {}, session, self.api)
        except Exception as e:
            logger.exception("Tool %s failed", name)
            return error_result(f"Internal error in {name}: {e}")

    async def get_prompt(self, name: str, arguments: Optional[dict] = None) -> types.GetPromptResult:
        """Build a prompt. Never raises."""
        spec = self.prompts.get(name)
        if spec is None:
            return prompt_error(f"Unknown prompt: {name}", role="assistant")

        try:
            session = self.store.load(check_permissions=False)
            if session is None:
                return prompt_error(NOT_LOGGED_IN, role="assistant")
            logger.debug("Building prompt %s", name)
            return await spec.handler(arguments or {}, session, self.api)
        except Exception as e:
            logger.exception("Prompt %s failed", name)
            return prompt_error(str(e), role="assistant")

    # -- protocol handlers -------------------------------------------------

    async def _on_list_tools(self, req: types.ListToolsRequest) -> types.ServerResult:
        return types.ServerResult(types.ListToolsResult(tools=await self.list_tools()))

    async def _on_list_prompts(self, req: types.ListPromptsRequest) -> types.ServerResult:
        return types.ServerResult(types.ListPromptsResult(prompts=await self.list_prompts()))

    async def _on_get_prompt(self, req: types.GetPromptRequest) -> types.ServerResult:
        return types.ServerResult(await self.get_prompt(req.params.name, req.params.arguments))

    async def _on_call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        return types.ServerResult(await self.call_tool(req.params.name, req.params.arguments))

    # -- lifecycle ---------------------------------------------------------

    async def start(self) -> None:
        """Bind the transport and start serving. Call once."""
        self._task = asyncio.create_task(self._run_transport())
        await asyncio.sleep(0)
        logger.info("Forge MCP server started")

    async def _run_transport(self) -> None:
        async with self._transport() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )

    async def wait_closed(self) -> None:
        """Block until the client disconnects or `stop()` is called."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def stop(self) -> None:
        """Close the channel. Safe before `start()` and safe to repeat."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug("Ignoring error while closing MCP transport: %s", e)
        logger.info("Forge MCP server stopped")
