"""Ticket entity and its status/priority vocabularies."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TicketStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | None) -> "TicketStatus":
        """Match a stored status string, falling back to UNKNOWN."""
        return _lookup(cls, value)

    @classmethod
    def choices(cls) -> list[str]:
        return [s.value for s in cls if s is not cls.UNKNOWN]


class TicketPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | None) -> "TicketPriority":
        """Match a stored priority string, falling back to UNKNOWN."""
        return _lookup(cls, value)

    @classmethod
    def choices(cls) -> list[str]:
        return [p.value for p in cls if p is not cls.UNKNOWN]


def _lookup(enum_cls, value):
    if value is None:
        return enum_cls.UNKNOWN
    needle = str(value).strip().lower()
    for member in enum_cls:
        if member is not enum_cls.UNKNOWN and member.value.lower() == needle:
            return member
    return enum_cls.UNKNOWN


DEFAULT_STATUS = TicketStatus.OPEN.value
DEFAULT_PRIORITY = TicketPriority.LOW.value


@dataclass
class Ticket:
    """A single support issue.

    ``status`` and ``priority`` keep the raw stored strings so that values
    written by other tools survive a load/save cycle untouched. Use
    ``status_kind`` / ``priority_kind`` for the parsed variants.
    """

    issue: str
    description: str
    status: str
    priority: str
    created_at: datetime
    id: str | None = None

    @classmethod
    def create(
        cls,
        issue: str,
        description: str,
        status: str = DEFAULT_STATUS,
        priority: str = DEFAULT_PRIORITY,
    ) -> "Ticket":
        """Build a new ticket stamped with the current local time."""
        return cls(
            issue=issue,
            description=description,
            status=status,
            priority=priority,
            created_at=datetime.now(),
        )

    @property
    def status_kind(self) -> TicketStatus:
        return TicketStatus.parse(self.status)

    @property
    def priority_kind(self) -> TicketPriority:
        return TicketPriority.parse(self.priority)
