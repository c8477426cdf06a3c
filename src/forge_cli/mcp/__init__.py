"""MCP server, tools and prompts for Forge."""
