"""Read-only git inspection for repository context."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

FILE_TREE_LIMIT = 200


class GitError(Exception):
    """A git command failed. `not_a_repository` is set for non-git directories."""

    def __init__(self, message: str, not_a_repository: bool = False):
        super().__init__(message)
        self.not_a_repository = not_a_repository


@dataclass
class GitStatus:
    modified: list[str] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)
    staged: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"modified": self.modified, "untracked": self.untracked, "staged": self.staged}


class GitService:
    """Thin wrapper over the git CLI. Every method raises GitError on failure."""

    def __init__(self, repo_path: Path):
        self.repo_path = Path(repo_path)

    def _git(self, *args: str) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                timeout=30,
            )
        except FileNotFoundError as e:
            # Either git is missing or the directory does not exist
            raise GitError(str(e), not_a_repository=True) from e
        except NotADirectoryError as e:
            raise GitError(str(e), not_a_repository=True) from e
        except subprocess.TimeoutExpired as e:
            raise GitError(f"git {args[0]} timed out") from e

        if result.returncode != 0:
            stderr = result.stderr.strip()
            logger.debug("git %s failed: %s", " ".join(args), stderr)
            lowered = stderr.lower()
            raise GitError(
                stderr or f"git {args[0]} exited with {result.returncode}",
                not_a_repository="not a git repository" in lowered or lowered.startswith("fatal"),
            )
        return result.stdout

    def get_branch(self) -> str:
        return self._git("rev-parse", "--abbrev-ref", "HEAD").strip()

    def get_status(self) -> GitStatus:
        status = GitStatus()
        for line in self._git("status", "--porcelain=v1").splitlines():
            if len(line) < 4:
                continue
            index, worktree, path = line[0], line[1], line[3:]
            if index == "?" and worktree == "?":
                status.untracked.append(path)
                continue
            if index not in (" ", "?"):
                status.staged.append(path)
            if "M" in (index, worktree):
                status.modified.append(path)
        return status

    def get_file_tree(self, limit: int = FILE_TREE_LIMIT) -> str:
        """Tracked files at HEAD, one per line, capped at `limit` entries."""
        raw = self._git("ls-tree", "--name-only", "-r", "HEAD")
        lines = [line for line in raw.splitlines() if line]
        return "\n".join(lines[:limit])
