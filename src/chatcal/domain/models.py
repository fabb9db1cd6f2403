from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from .enums import ChatRole, CommandName


def parse_timestamp(value: Any) -> datetime:
    """Coerce ``value`` into a timezone-aware datetime.

    Strings are read as ISO-8601; naive values are taken to be local time.
    Integers are epoch milliseconds.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    elif isinstance(value, int) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000).astimezone()
    else:
        raise ValueError(f"Unsupported datetime value: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def to_epoch_millis(value: datetime) -> int:
    return round(value.timestamp() * 1000)


@dataclass(slots=True)
class Event:
    id: str
    title: str
    start_time: datetime
    end_time: datetime
    description: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Event":
        """Build an event from an ``events`` table row."""

        return cls(
            id=str(record["id"]),
            title=str(record["title"]),
            start_time=parse_timestamp(int(record["startTime"])),
            end_time=parse_timestamp(int(record["endTime"])),
            description=record["description"],
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "startTime": to_epoch_millis(self.start_time),
            "endTime": to_epoch_millis(self.end_time),
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Event":
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            start_time=parse_timestamp(data["startTime"]),
            end_time=parse_timestamp(data["endTime"]),
            description=data.get("description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "description": self.description,
        }

    def apply_changes(self, changes: Mapping[str, Any]) -> None:
        """Merge ``changes`` into this event, leaving other fields untouched."""

        editable = {item.name for item in fields(self)} - {"id"}
        unknown = set(changes) - editable
        if unknown:
            raise TypeError(f"Cannot update event fields: {', '.join(sorted(unknown))}")
        if "title" in changes:
            title = changes["title"]
            if not isinstance(title, str) or not title.strip():
                raise ValueError("Event title must be a non-empty string")
        description = changes.get("description")
        if description is not None and not isinstance(description, str):
            raise ValueError("Event description must be a string or None")
        converted = {
            name: parse_timestamp(value) if name in ("start_time", "end_time") else value
            for name, value in changes.items()
        }
        for name, value in converted.items():
            setattr(self, name, value)


@dataclass(slots=True)
class Command:
    """A single ``ACTION:<NAME>(...)`` request extracted from model output."""

    name: str
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def kind(self) -> Optional[CommandName]:
        try:
            return CommandName(self.name)
        except ValueError:
            return None


CommandResult = Union[str, List[Event]]


@dataclass(slots=True)
class ChatMessage:
    role: ChatRole
    content: CommandResult
    timestamp: Optional[datetime] = None

    @property
    def is_event_list(self) -> bool:
        return isinstance(self.content, list)
