"""Application services orchestrating data access and domain logic."""

from __future__ import annotations

from .context import ServiceContext
from .event_store import EventStore, Listener

__all__ = ["EventStore", "Listener", "ServiceContext"]
