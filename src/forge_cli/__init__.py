"""Forge CLI - ticket browsing, device-flow sign-in, and an MCP server for AI assistants."""

__version__ = "0.1.0"
