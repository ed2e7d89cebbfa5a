"""Workspace configuration loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, field_validator, model_validator

from ticket_desk.backends import BACKENDS, get_backend
from ticket_desk.env import get_overrides
from ticket_desk.store import DEFAULT_KEY, TicketStore

CONFIG_FILENAME = "td.yaml"

DEFAULT_PATHS = {
    "memory": "",
    "sqlite": "./tickets.db",
    "yaml": "./tickets.yaml",
}


class TicketDeskConfig(BaseModel):
    """Top-level ticket-desk configuration."""

    backend: str = "sqlite"
    path: str | None = None
    key: str = DEFAULT_KEY

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        if v not in BACKENDS:
            raise ValueError(f"Unknown backend: {v}. Available: {list(BACKENDS.keys())}")
        return v

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Storage key must not be empty")
        return v

    @model_validator(mode="after")
    def default_path_for_backend(self) -> "TicketDeskConfig":
        if self.path is None:
            self.path = DEFAULT_PATHS[self.backend]
        return self


def load_config(base_dir: str | Path | None = None) -> TicketDeskConfig:
    """Load td.yaml from the workspace, or return defaults.

    TICKET_DESK_* environment variables override values from the file.
    """
    if base_dir is None:
        base_dir = Path.cwd()
    base_dir = Path(base_dir)

    data: dict[str, Any] = {}
    config_path = base_dir / CONFIG_FILENAME
    if config_path.exists():
        with open(config_path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"{config_path} is not valid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"{config_path} must contain a mapping, got {type(data).__name__}")

    data.update(get_overrides())
    return TicketDeskConfig(**data)


def write_default_config(base_dir: str | Path) -> Path:
    """Write a td.yaml with default values unless one already exists."""
    config_path = Path(base_dir) / CONFIG_FILENAME
    if not config_path.exists():
        defaults = TicketDeskConfig()
        with open(config_path, "w") as f:
            yaml.safe_dump(defaults.model_dump(), f, default_flow_style=False, sort_keys=False)
    return config_path


def build_store(config: TicketDeskConfig, base_dir: str | Path | None = None) -> TicketStore:
    """Create an uninitialized store for the configured backend.

    Relative paths are resolved against the workspace directory.
    """
    base_dir = Path(base_dir) if base_dir else Path.cwd()
    if config.backend == "memory":
        backend = get_backend("memory")
    else:
        path = Path(config.path).expanduser()
        if not path.is_absolute():
            path = base_dir / path
        backend = get_backend(config.backend, path=path)
    return TicketStore(backend, key=config.key)
