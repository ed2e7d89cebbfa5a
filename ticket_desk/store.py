"""The ticket store: owner of the persisted, ordered ticket list."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import uuid

from ticket_desk import codec
from ticket_desk.backends.base import BaseBackend
from ticket_desk.errors import (
    CorruptStateError,
    DecodeError,
    IndexOutOfRangeError,
    InitializationError,
    TicketNotFoundError,
)
from ticket_desk.models import Ticket

logger = logging.getLogger(__name__)

DEFAULT_KEY = "tickets"


def new_ticket_id() -> str:
    return uuid.uuid4().hex


class TicketStore:
    """Async ticket store over a key-value backend.

    All tickets live as one list of JSON strings under a single key. Every
    mutation is a full read-modify-write of that list.

    Tickets are addressed by position (index at the time of the call) or by
    their stable ``id``. Positions shift after ``add``/``delete_*``, so
    callers must re-read indices after every mutation.

    Mutations are serialized through a per-store lock, so two overlapping
    calls on the same store never lose each other's write. Reads do not take
    the lock; a backend write replaces the whole list at once, so a reader
    sees either the old or the new list.
    """

    def __init__(self, backend: BaseBackend, key: str = DEFAULT_KEY):
        self.backend = backend
        self.key = key
        self._initialized = False
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        if self._initialized:
            return
        await self.backend.open()
        self._initialized = True
        logger.debug("Ticket store bound to %s (key=%r)", type(self.backend).__name__, self.key)

    async def close(self) -> None:
        if self._initialized:
            await self.backend.close()
            self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise InitializationError("TicketStore not initialized. Call initialize() first.")

    # ── Reads ─────────────────────────────────────────────────────────

    async def load_all(self) -> list[Ticket]:
        """Return every stored ticket in insertion order.

        An absent key is the empty state and yields ``[]``.
        """
        self._require_initialized()
        raw = await self.backend.get_string_list(self.key)
        if raw is None:
            logger.debug("No tickets stored under %r", self.key)
            return []
        if not isinstance(raw, list):
            raise CorruptStateError(
                f"Value under '{self.key}' must be a list, got {type(raw).__name__}"
            )

        tickets: list[Ticket] = []
        for position, entry in enumerate(raw):
            if not isinstance(entry, str):
                raise CorruptStateError(
                    f"Entry {position} under '{self.key}' must be a string, "
                    f"got {type(entry).__name__}"
                )
            try:
                tickets.append(codec.loads(entry))
            except (CorruptStateError, DecodeError):
                logger.warning("Rejected stored ticket at position %d", position)
                raise
        logger.debug("Loaded %d tickets", len(tickets))
        return tickets

    async def count(self) -> int:
        return len(await self.load_all())

    async def get_at(self, index: int) -> Ticket:
        tickets = await self.load_all()
        _check_index(index, tickets)
        return tickets[index]

    async def get_by_id(self, ticket_id: str) -> Ticket:
        tickets = await self.load_all()
        return tickets[_position_of(ticket_id, tickets)]

    # ── Positional mutations ──────────────────────────────────────────

    async def add(self, ticket: Ticket) -> Ticket:
        """Append a ticket at the end and return it as stored.

        A ticket without an id is given a fresh one.
        """
        self._require_initialized()
        if ticket.id is None:
            ticket = dataclasses.replace(ticket, id=new_ticket_id())
        async with self._lock:
            tickets = await self.load_all()
            tickets.append(ticket)
            await self._write(tickets)
        logger.info("Added ticket %s at position %d", ticket.id, len(tickets) - 1)
        return ticket

    async def delete_at(self, index: int) -> Ticket:
        """Remove the ticket at index; later tickets shift down by one."""
        self._require_initialized()
        async with self._lock:
            tickets = await self.load_all()
            _check_index(index, tickets)
            removed = tickets.pop(index)
            await self._write(tickets)
        logger.info("Deleted ticket at position %d", index)
        return removed

    async def update_at(self, index: int, ticket: Ticket) -> Ticket:
        """Replace the ticket at index, keeping its position and id."""
        self._require_initialized()
        async with self._lock:
            tickets = await self.load_all()
            _check_index(index, tickets)
            stored = _keep_identity(tickets[index], ticket)
            tickets[index] = stored
            await self._write(tickets)
        logger.info("Updated ticket at position %d", index)
        return stored

    # ── Id-based mutations ────────────────────────────────────────────

    async def delete_by_id(self, ticket_id: str) -> Ticket:
        self._require_initialized()
        async with self._lock:
            tickets = await self.load_all()
            removed = tickets.pop(_position_of(ticket_id, tickets))
            await self._write(tickets)
        logger.info("Deleted ticket %s", ticket_id)
        return removed

    async def update_by_id(self, ticket_id: str, ticket: Ticket) -> Ticket:
        self._require_initialized()
        async with self._lock:
            tickets = await self.load_all()
            position = _position_of(ticket_id, tickets)
            stored = _keep_identity(tickets[position], ticket)
            tickets[position] = stored
            await self._write(tickets)
        logger.info("Updated ticket %s", ticket_id)
        return stored

    async def _write(self, tickets: list[Ticket]) -> None:
        # Encode everything first so a bad ticket fails before the backend is touched.
        payload = [codec.dumps(t) for t in tickets]
        await self.backend.set_string_list(self.key, payload)
        logger.debug("Wrote %d tickets under %r", len(payload), self.key)


def _check_index(index: int, tickets: list[Ticket]) -> None:
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"Ticket index must be an int, got {type(index).__name__}")
    if not 0 <= index < len(tickets):
        raise IndexOutOfRangeError(index, len(tickets))


def _position_of(ticket_id: str | None, tickets: list[Ticket]) -> int:
    # Tickets stored before ids existed carry None and are only reachable by position.
    if ticket_id is None:
        raise TicketNotFoundError(ticket_id)
    for position, ticket in enumerate(tickets):
        if ticket.id is not None and ticket.id == ticket_id:
            return position
    raise TicketNotFoundError(ticket_id)


def _keep_identity(current: Ticket, replacement: Ticket) -> Ticket:
    return dataclasses.replace(replacement, id=current.id or new_ticket_id())
