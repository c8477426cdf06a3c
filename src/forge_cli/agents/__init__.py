"""Markdown agent guides embedded in Forge MCP prompts."""
