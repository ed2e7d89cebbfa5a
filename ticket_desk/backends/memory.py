"""In-process backend, used by tests and throwaway sessions."""

from __future__ import annotations

from typing import Any

from ticket_desk.backends.base import BaseBackend


class MemoryBackend(BaseBackend):
    """Keeps values in a dict for the lifetime of the object."""

    def __init__(self, data: dict[str, Any] | None = None):
        self.data: dict[str, Any] = dict(data or {})
        self.writes = 0

    async def get_string_list(self, key: str) -> list[str] | None:
        value = self.data.get(key)
        if isinstance(value, list):
            return list(value)
        return value

    async def set_string_list(self, key: str, values: list[str]) -> None:
        self.data[key] = list(values)
        self.writes += 1
