"""Conversion between Ticket objects and stored records.

A record is a plain mapping of string keys to primitive values::

    {"issue": ..., "description": ..., "status": ..., "priority": ...,
     "createdAt": "2024-05-01T09:30:00.123456", "id": "..."}

Each record is stored as one JSON string inside the backend's string list.
``id`` is only written when the ticket has one, so records produced by
older versions (which never carried an id) still decode.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from ticket_desk.errors import CorruptStateError, DecodeError
from ticket_desk.models import DEFAULT_PRIORITY, Ticket

_REQUIRED_FIELDS = ("issue", "description", "status")


def encode(ticket: Ticket) -> dict[str, Any]:
    record: dict[str, Any] = {
        "issue": ticket.issue,
        "description": ticket.description,
        "status": ticket.status,
        "priority": ticket.priority,
        "createdAt": ticket.created_at.isoformat(),
    }
    if ticket.id is not None:
        record["id"] = ticket.id
    return record


def decode(record: dict[str, Any]) -> Ticket:
    """Build a Ticket from a record.

    Missing or null ``priority`` becomes ``"Low"``. Any other missing field,
    a non-string value, or an unparseable ``createdAt`` raises DecodeError.
    """
    if not isinstance(record, dict):
        raise DecodeError(f"Ticket record must be a mapping, got {type(record).__name__}")

    values: dict[str, str] = {}
    for name in _REQUIRED_FIELDS:
        values[name] = _require_str(record, name)

    priority = record.get("priority")
    if priority is None:
        priority = DEFAULT_PRIORITY
    elif not isinstance(priority, str):
        raise DecodeError(f"Field 'priority' must be a string, got {type(priority).__name__}")

    ticket_id = record.get("id")
    if ticket_id is not None and not isinstance(ticket_id, str):
        raise DecodeError(f"Field 'id' must be a string, got {type(ticket_id).__name__}")

    return Ticket(
        issue=values["issue"],
        description=values["description"],
        status=values["status"],
        priority=priority,
        created_at=parse_timestamp(_require_str(record, "createdAt")),
        id=ticket_id,
    )


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z`` for UTC."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise DecodeError(f"Invalid createdAt timestamp: {value!r}") from e


def dumps(ticket: Ticket) -> str:
    return json.dumps(encode(ticket), ensure_ascii=False)


def loads(text: str) -> Ticket:
    """Decode one stored JSON string.

    Text that is not a JSON object means the stored list itself is damaged
    and raises CorruptStateError; field problems raise DecodeError.
    """
    try:
        record = json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptStateError(f"Stored ticket entry is not valid JSON: {e}") from e
    if not isinstance(record, dict):
        raise CorruptStateError(
            f"Stored ticket entry must be a JSON object, got {type(record).__name__}"
        )
    return decode(record)


def _require_str(record: dict[str, Any], name: str) -> str:
    value = record.get(name)
    if value is None:
        raise DecodeError(f"Ticket record is missing required field '{name}'")
    if not isinstance(value, str):
        raise DecodeError(f"Field '{name}' must be a string, got {type(value).__name__}")
    return value
