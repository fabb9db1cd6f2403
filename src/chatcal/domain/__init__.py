"""Domain models for the schedule and its command grammar."""

from __future__ import annotations

from .enums import ChatRole, CommandName, StoreState
from .models import ChatMessage, Command, CommandResult, Event, parse_timestamp

__all__ = [
    "ChatMessage",
    "ChatRole",
    "Command",
    "CommandName",
    "CommandResult",
    "Event",
    "StoreState",
    "parse_timestamp",
]
