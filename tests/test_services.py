"""Tests for git inspection, the Claude launcher and ticket service helpers."""

import subprocess
from unittest.mock import Mock, patch

import pytest

from forge_cli.services import tickets
from forge_cli.services.claude import ClaudeNotFoundError, build_prompt, spawn_claude
from forge_cli.services.git import GitError, GitService


def completed(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(args=["git"], returncode=returncode, stdout=stdout, stderr=stderr)


class TestGitService:
    """GitService over a patched subprocess."""

    @patch("forge_cli.services.git.subprocess.run")
    def test_branch(self, mock_run, tmp_path):
        mock_run.return_value = completed("forge/t-1\n")

        assert GitService(tmp_path).get_branch() == "forge/t-1"
        assert mock_run.call_args.args[0] == ["git", "rev-parse", "--abbrev-ref", "HEAD"]

    @patch("forge_cli.services.git.subprocess.run")
    def test_status_porcelain(self, mock_run, tmp_path):
        mock_run.return_value = completed(
            " M src/a.py\n"
            "M  src/b.py\n"
            "A  src/c.py\n"
            "?? notes.txt\n"
        )

        status = GitService(tmp_path).get_status()

        assert status.modified == ["src/a.py", "src/b.py"]
        assert status.staged == ["src/b.py", "src/c.py"]
        assert status.untracked == ["notes.txt"]

    @patch("forge_cli.services.git.subprocess.run")
    def test_file_tree_is_capped(self, mock_run, tmp_path):
        mock_run.return_value = completed("".join(f"f{i}.py\n" for i in range(5)))

        assert GitService(tmp_path).get_file_tree(limit=2) == "f0.py\nf1.py"

    @patch("forge_cli.services.git.subprocess.run")
    def test_not_a_repository(self, mock_run, tmp_path):
        mock_run.return_value = completed(
            returncode=128,
            stderr="fatal: not a git repository (or any of the parent directories): .git",
        )

        with pytest.raises(GitError) as exc_info:
            GitService(tmp_path).get_branch()

        assert exc_info.value.not_a_repository is True

    @patch("forge_cli.services.git.subprocess.run", side_effect=FileNotFoundError("git"))
    def test_missing_git(self, mock_run, tmp_path):
        with pytest.raises(GitError) as exc_info:
            GitService(tmp_path).get_branch()

        assert exc_info.value.not_a_repository is True


class TestClaudeLauncher:
    """spawn_claude."""

    def test_prompt_names_mcp_prompt(self):
        assert "forge-develop" in build_prompt("develop", "T-1")
        assert '"T-1"' in build_prompt("develop", "T-1")

    @patch("forge_cli.services.claude.subprocess.run")
    def test_returns_exit_code(self, mock_run):
        mock_run.return_value = Mock(returncode=4)

        assert spawn_claude("review", "T-1") == 4

    @patch("forge_cli.services.claude.subprocess.run", side_effect=FileNotFoundError("claude"))
    def test_missing_claude(self, mock_run):
        with pytest.raises(ClaudeNotFoundError):
            spawn_claude("execute", "T-1")


class TestTicketService:
    """Request shapes for ticket operations."""

    @pytest.mark.parametrize("raw, expected", [
        (None, "all"),
        ("", "all"),
        ("  ", "all"),
        ("all", "all"),
        (" ALL ", "all"),
        ("mine", "mine"),
        ("bogus", "mine"),
        (3, "all"),
    ])
    def test_normalize_filter(self, raw, expected):
        assert tickets.normalize_filter(raw) == expected

    @pytest.mark.asyncio
    async def test_member_names_fall_back_to_email(self, api, backend, session):
        backend.add("GET", "/teams/team-1/members", 200, {"members": [
            {"userId": "u1", "displayName": "Ada"},
            {"userId": "u2", "email": "bob@example.com"},
            {"email": "nobody@example.com"},
        ]})

        assert await tickets.member_names(api, session) == {"u1": "Ada", "u2": "bob@example.com"}

    @pytest.mark.asyncio
    async def test_ticket_id_is_trimmed(self, api, backend, session):
        backend.add("GET", "/tickets/T-1", 200, {"id": "T-1", "title": "x", "status": "NEW_STATE"})

        ticket = await tickets.get_ticket_detail(api, session, "  T-1 ")

        # Unknown statuses from a newer backend are kept as strings
        assert ticket.status == "NEW_STATE"

    @pytest.mark.asyncio
    async def test_assign_defaults_to_current_user(self, api, backend, session):
        backend.add("PATCH", "/tickets/T-1", 200, {})

        await tickets.assign_ticket(api, session, "T-1")

        assert backend.requests[0].read() == b'{"assignedTo": "user-1"}'
