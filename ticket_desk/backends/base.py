"""Abstract base class for key-value persistence backends."""

from __future__ import annotations

import abc


class BaseBackend(abc.ABC):
    """A durable key-value store holding ordered lists of strings.

    Backends hand back exactly what was stored; validating the shape of the
    value is left to the caller.
    """

    async def open(self) -> None:
        """Acquire whatever resources the backend needs."""

    async def close(self) -> None:
        """Release resources acquired by open()."""

    @abc.abstractmethod
    async def get_string_list(self, key: str) -> list[str] | None:
        """Return the list stored under key, or None if the key is absent."""
        ...

    @abc.abstractmethod
    async def set_string_list(self, key: str, values: list[str]) -> None:
        """Replace the value stored under key with values."""
        ...
