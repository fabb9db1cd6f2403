from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, List

import orjson

from ..domain import ChatMessage, ChatRole, CommandResult, Event, parse_timestamp
from .backend import SqliteEventBackend

logger = logging.getLogger(__name__)

MESSAGES_SCHEMA = """
CREATE TABLE IF NOT EXISTS messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    role TEXT NOT NULL,
    content TEXT NOT NULL,
    timestamp INTEGER NOT NULL
);
"""


def _encode_content(content: CommandResult) -> str:
    if isinstance(content, str):
        payload: Any = {"text": content}
    else:
        payload = [event.to_dict() for event in content]
    return orjson.dumps(payload).decode("utf-8")


def _decode_content(raw: str) -> CommandResult:
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError:
        return raw
    if isinstance(payload, dict) and "text" in payload:
        return str(payload["text"])
    if isinstance(payload, list):
        return [Event.from_dict(item) for item in payload]
    return raw


@dataclass(slots=True)
class ChatTranscript:
    """Append-only log of the conversation, stored beside the events table."""

    backend: SqliteEventBackend

    async def initialize(self) -> None:
        await self.backend.open()
        await self.backend.execute_schema(MESSAGES_SCHEMA)

    async def save_message(self, role: ChatRole, content: CommandResult) -> None:
        await self.backend.write(
            "INSERT INTO messages (role, content, timestamp) VALUES (?, ?, ?)",
            (ChatRole(role).value, _encode_content(content), int(time.time() * 1000)),
        )

    async def get_all_messages(self) -> List[ChatMessage]:
        rows = await self.backend.read_all("SELECT role, content, timestamp FROM messages ORDER BY timestamp ASC, id ASC")
        return [
            ChatMessage(
                role=ChatRole(row["role"]),
                content=_decode_content(row["content"]),
                timestamp=parse_timestamp(int(row["timestamp"])),
            )
            for row in rows
        ]

    async def clear_all(self) -> None:
        await self.backend.write("DELETE FROM messages")
        logger.info("Chat transcript cleared")
