"""SQLite repositories for first-class domain objects."""

from __future__ import annotations

from .events import EVENTS_SCHEMA, EventRepository

__all__ = ["EVENTS_SCHEMA", "EventRepository"]
