"""Persistence backend abstractions and implementations."""

from ticket_desk.backends.base import BaseBackend
from ticket_desk.backends.memory import MemoryBackend
from ticket_desk.backends.sqlite import SQLiteBackend
from ticket_desk.backends.yaml_file import YAMLFileBackend

BACKENDS: dict[str, type[BaseBackend]] = {
    "memory": MemoryBackend,
    "sqlite": SQLiteBackend,
    "yaml": YAMLFileBackend,
}


def get_backend(name: str, **kwargs) -> BaseBackend:
    """Get a persistence backend by name."""
    if name not in BACKENDS:
        raise ValueError(
            f"Unknown backend: {name}. Available: {list(BACKENDS.keys())}"
        )
    return BACKENDS[name](**kwargs)

__all__ = [
    "BaseBackend",
    "MemoryBackend",
    "SQLiteBackend",
    "YAMLFileBackend",
    "get_backend",
    "BACKENDS",
]
