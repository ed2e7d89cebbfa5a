"""Error types raised by the ticket store and its collaborators."""

from __future__ import annotations


class TicketDeskError(Exception):
    """Base class for every error raised by ticket-desk."""


class InitializationError(TicketDeskError, RuntimeError):
    """The store was used before initialize() bound its backend."""


class DecodeError(TicketDeskError, ValueError):
    """A stored record cannot be turned into a Ticket."""


class CorruptStateError(TicketDeskError):
    """The backend returned a value with an unexpected shape."""


class IndexOutOfRangeError(TicketDeskError, IndexError):
    """A positional operation referenced an index that does not exist."""

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Ticket index {index} out of range (0 <= index < {length})")


class TicketNotFoundError(TicketDeskError, KeyError):
    """No stored ticket carries the requested id."""

    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__(ticket_id)

    def __str__(self) -> str:
        return f"Ticket '{self.ticket_id}' not found."


class BackendError(TicketDeskError):
    """The persistence backend failed to open, read or write."""
