"""Shared fixtures for ticket-desk tests."""

from __future__ import annotations

from datetime import datetime

import pytest

from ticket_desk.backends import MemoryBackend
from ticket_desk.models import Ticket
from ticket_desk.store import TicketStore


def make_ticket(issue: str = "Login fails", **overrides) -> Ticket:
    fields = {
        "issue": issue,
        "description": f"{issue} - details",
        "status": "Open",
        "priority": "Medium",
        "created_at": datetime(2024, 5, 1, 9, 30, 0, 123456),
    }
    fields.update(overrides)
    return Ticket(**fields)


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    """A store over an in-memory backend. Tests call initialize() themselves."""
    return TicketStore(backend)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("TICKET_DESK_BACKEND", "TICKET_DESK_PATH", "TICKET_DESK_KEY"):
        monkeypatch.delenv(name, raising=False)
