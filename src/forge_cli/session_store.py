"""Persisted session file for Forge CLI."""

from __future__ import annotations

import json
import logging
import os
import stat
from pathlib import Path
from typing import Optional

from .errors import SessionStoreError
from .models.session import Session

logger = logging.getLogger(__name__)

OWNER_ONLY = 0o600


class SessionStore:
    """Reads and writes the session JSON file.

    The file holds a single camelCase record. There is no locking: two
    processes writing at once means the last writer wins.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self, check_permissions: bool = True) -> Optional[Session]:
        """Load the session, or None if nobody is logged in.

        Raises:
            SessionStoreError: if the file exists but is malformed or incomplete.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

        if check_permissions:
            self._warn_if_exposed()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SessionStoreError(
                "Config file is malformed. Run `forge login` to re-authenticate.",
                suggestions=["Run: forge login"],
            ) from e

        try:
            return Session.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise SessionStoreError(
                "Config file is corrupt or invalid. Run `forge login` to re-authenticate.",
                suggestions=["Run: forge login"],
            ) from e

    def save(self, session: Session) -> None:
        """Write the session atomically, readable by its owner only.

        The record goes to a sibling temp file created with mode 0600 and is
        then renamed over the old file, so the token is never on disk with
        wider permissions and readers never see a half-written file.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        # A leftover temp file may carry another mode; O_EXCL needs it gone
        tmp.unlink(missing_ok=True)
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_EXCL, OWNER_ONLY)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(session.to_dict(), f, indent=2)
            # chmod is meaningless on Windows ACLs
            if os.name == "posix":
                os.chmod(tmp, OWNER_ONLY)
            os.replace(tmp, self.path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug("Saved session to %s", self.path)

    def clear(self) -> None:
        """Delete the session file. A missing file is not an error."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        logger.debug("Removed session file %s", self.path)

    def _warn_if_exposed(self) -> None:
        if os.name != "posix":
            return
        try:
            mode = stat.S_IMODE(self.path.stat().st_mode)
        except OSError:
            return
        if mode != OWNER_ONLY:
            logger.warning(
                "%s permissions are %o, not 600. Run: chmod 600 %s",
                self.path, mode, self.path,
            )
