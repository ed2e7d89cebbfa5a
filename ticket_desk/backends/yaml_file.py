"""Single YAML file key-value persistence."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import yaml

from ticket_desk.backends.base import BaseBackend
from ticket_desk.errors import BackendError, CorruptStateError


class YAMLFileBackend(BaseBackend):
    """Keeps every key in one YAML mapping on disk.

    The file is rewritten as a whole on each write: the new content goes to
    a temporary file in the same directory which then replaces the target,
    so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: str | Path = "tickets.yaml"):
        self.path = Path(path)

    async def open(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackendError(f"Could not create directory for {self.path}: {e}") from e

    async def get_string_list(self, key: str) -> list[str] | None:
        return self._load().get(key)

    async def set_string_list(self, key: str, values: list[str]) -> None:
        data = self._load()
        data[key] = list(values)
        self._dump(data)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise CorruptStateError(f"{self.path} is not valid UTF-8 YAML: {e}") from e
        except OSError as e:
            raise BackendError(f"Failed to read {self.path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise CorruptStateError(
                f"{self.path} must contain a mapping, got {type(data).__name__}"
            )
        return data

    def _dump(self, data: dict) -> None:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(
                    data, f, default_flow_style=False, sort_keys=False, allow_unicode=True
                )
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise BackendError(f"Failed to write {self.path}: {e}") from e
