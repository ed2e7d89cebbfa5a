"""Ticket Desk - local support ticket tracking."""

__version__ = "0.1.0"
