"""Tests for MCP server registration."""

import json
import subprocess
from unittest.mock import patch

from forge_cli.mcp.install import FORGE_SERVER_ENTRY, try_register_mcp_server, write_mcp_json


class TestWriteMcpJson:
    """Project-level .mcp.json."""

    def test_creates_file(self, tmp_path):
        path = write_mcp_json(tmp_path)

        assert path == tmp_path / ".mcp.json"
        assert json.loads(path.read_text()) == {"mcpServers": {"forge": FORGE_SERVER_ENTRY}}

    def test_preserves_other_servers(self, tmp_path):
        """Should merge the forge entry without touching other entries."""
        other = {"type": "stdio", "command": "other"}
        (tmp_path / ".mcp.json").write_text(json.dumps({
            "mcpServers": {"other": other, "forge": {"command": "old"}},
            "extra": True,
        }))

        data = json.loads(write_mcp_json(tmp_path).read_text())

        assert data["mcpServers"]["other"] == other
        assert data["mcpServers"]["forge"] == FORGE_SERVER_ENTRY
        assert data["extra"] is True

    def test_malformed_file_is_replaced(self, tmp_path):
        (tmp_path / ".mcp.json").write_text("{oops")

        data = json.loads(write_mcp_json(tmp_path).read_text())

        assert data == {"mcpServers": {"forge": FORGE_SERVER_ENTRY}}


class TestTryRegister:
    """`claude mcp add` is best effort."""

    @patch("forge_cli.mcp.install.subprocess.run")
    def test_registered(self, mock_run):
        assert try_register_mcp_server() == "registered"

        cmd = mock_run.call_args.args[0]
        assert cmd[:3] == ["claude", "mcp", "add"]
        assert cmd[-3:] == ["--", "forge", "mcp"]
        assert "project" in cmd

    @patch("forge_cli.mcp.install.subprocess.run", side_effect=FileNotFoundError("claude"))
    def test_missing_binary_is_skipped(self, mock_run):
        assert try_register_mcp_server() == "skipped"

    @patch(
        "forge_cli.mcp.install.subprocess.run",
        side_effect=subprocess.CalledProcessError(1, ["claude"]),
    )
    def test_failure_is_skipped(self, mock_run):
        assert try_register_mcp_server(scope="user") == "skipped"
