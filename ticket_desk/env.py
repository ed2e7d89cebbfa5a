"""Environment configuration loader."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TICKET_DESK_"

_OVERRIDABLE = ("backend", "path", "key")


def load_environment(workspace_dir: str | Path | None = None) -> None:
    """Load environment variables from a .env file.

    Searches for .env in:
    1. The specified workspace_dir
    2. Current working directory

    Variables already set in the process environment win.
    """
    search_paths = []

    if workspace_dir:
        search_paths.append(Path(workspace_dir) / ".env")

    search_paths.append(Path.cwd() / ".env")

    for env_path in search_paths:
        if env_path.exists():
            load_dotenv(env_path, override=False)
            return


def get_overrides() -> dict[str, str]:
    """Collect TICKET_DESK_* settings from the environment.

    Returns:
        Dict of config field name to value, only for variables that are set
        and non-empty.
    """
    overrides = {}
    for name in _OVERRIDABLE:
        value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if value:
            overrides[name] = value
    return overrides
