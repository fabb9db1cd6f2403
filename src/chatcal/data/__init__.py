"""Data access layer."""

from __future__ import annotations

from .backend import SqliteEventBackend
from .cache import EventSnapshot
from .repositories import EventRepository
from .transcript import ChatTranscript

__all__ = [
    "ChatTranscript",
    "EventRepository",
    "EventSnapshot",
    "SqliteEventBackend",
]
