"""
Runtime settings for the inspection sync engine.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

ENV_PREFIX = "INSPECTION_SYNC_"

DEFAULT_BASE_URL = "https://api.marnix.in"
DEFAULT_PAGE_SIZE = 25
DEFAULT_LIST_TTL_MS = 5 * 60 * 1000  # 5 minutes


class Settings(BaseModel):
    """Engine configuration.

    Build with ``Settings.from_env()`` in applications; tests construct it
    directly so the process environment is never consulted.
    """

    base_url: str = DEFAULT_BASE_URL
    token: str | None = None
    timeout: float = 15.0
    page_size: int = DEFAULT_PAGE_SIZE
    list_ttl_ms: int = DEFAULT_LIST_TTL_MS
    data_dir: Path = Path("~/.inspection_sync")

    @property
    def database_path(self) -> Path:
        return self.data_dir.expanduser() / "state.sqlite"

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> Settings:
        """Load ``.env`` (first match wins) and read prefixed variables."""
        env_locations = [
            Path(env_file) if env_file else None,
            Path.cwd() / ".env",
            Path.home() / ".inspection_sync" / ".env",
        ]
        for env_path in env_locations:
            if env_path is not None and env_path.exists():
                load_dotenv(env_path)
                break

        values: dict[str, str] = {}
        for name in cls.model_fields:
            raw = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        return cls(**values)
