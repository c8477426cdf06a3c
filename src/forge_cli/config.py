"""Runtime settings for Forge CLI.

Everything is read from the environment so the same binary can point at a
local backend during development and at the hosted service in production.

### Environment

| Variable | Default | Meaning |
|---|---|---|
| `FORGE_API_URL` | `http://localhost:3001/api` | Backend base URL, including the `/api` prefix |
| `FORGE_APP_URL` | `https://forge.app` | Web app URL shown in hints |
| `FORGE_CONFIG_DIR` | `~/.forge` | Directory holding the persisted session |
| `FORGE_HTTP_TIMEOUT` | unset | Per-request timeout in seconds; unset means no client-side timeout |
| `FORGE_LOG_LEVEL` | unset | Overrides the log level chosen by `--verbose` |
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_APP_URL = "https://forge.app"
DEFAULT_CONFIG_DIR = Path.home() / ".forge"
CONFIG_FILE = "config.json"

# Fixed delay before the single retry of a 5xx response
RETRY_DELAY_SECONDS = 2.0
# Upper bound on device-flow polling
MAX_POLL_MS = 300_000


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    api_url: str = DEFAULT_API_URL
    app_url: str = DEFAULT_APP_URL
    config_dir: Path = DEFAULT_CONFIG_DIR
    http_timeout: Optional[float] = None
    retry_delay: float = RETRY_DELAY_SECONDS
    max_poll_ms: int = MAX_POLL_MS

    @property
    def config_path(self) -> Path:
        """Path of the persisted session file."""
        return self.config_dir / CONFIG_FILE

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        config_dir = os.environ.get("FORGE_CONFIG_DIR")
        return cls(
            api_url=os.environ.get("FORGE_API_URL", DEFAULT_API_URL).rstrip("/"),
            app_url=os.environ.get("FORGE_APP_URL", DEFAULT_APP_URL),
            config_dir=Path(config_dir).expanduser() if config_dir else DEFAULT_CONFIG_DIR,
            http_timeout=_parse_timeout(os.environ.get("FORGE_HTTP_TIMEOUT")),
        )


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, reading the environment once."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
