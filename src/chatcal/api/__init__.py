"""Payload models and serializers shared by the CLI and the chat transcript."""

from __future__ import annotations

from .models import EventPayload, EventUpdatePayload
from .serializers import dumps, serialize_event, serialize_result

__all__ = ["EventPayload", "EventUpdatePayload", "dumps", "serialize_event", "serialize_result"]
